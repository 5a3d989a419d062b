from sqlalchemy import Column, LargeBinary
from wardrounds.database import Base


class User(Base):
    __tablename__ = "user"

    # Both columns hold MySQL AES_ENCRYPT output; see services/credential_cipher.py
    id_user = Column(LargeBinary(700), primary_key=True)
    password = Column(LargeBinary(700), nullable=False)
