"""Domain errors raised by services and translated by the routers."""


class TaskMasterError(Exception):
    pass


class ValidationError(TaskMasterError):
    """Champ requis absent ou invalide (ex: user_id manquant)."""


class NotFoundError(TaskMasterError):
    """Id inconnu ou qui n'appartient pas au user_id."""


class StoreError(TaskMasterError):
    """Échec de la couche de persistance."""


class NotifierError(TaskMasterError):
    """Échec d'envoi d'email."""


class DirectoryLookupError(TaskMasterError):
    """Email de l'utilisateur introuvable."""
