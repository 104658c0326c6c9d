from sqlalchemy import Column, String
from taskmaster.core.clock import utc_now
from taskmaster.core.database import Base, UTCDateTime

class User(Base):
    # Annuaire des utilisateurs (géré par le fournisseur d'auth, lu seulement ici)
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=True, index=True)
    created_at = Column(UTCDateTime, default=utc_now)
