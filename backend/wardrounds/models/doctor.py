from sqlalchemy import Column, String
from wardrounds.database import Base


class Doctor(Base):
    __tablename__ = "dokter"

    kd_dokter = Column(String(20), primary_key=True)
    nm_dokter = Column(String(50))
    no_telp = Column(String(13))
    kd_sps = Column(String(5))
    status = Column(String(1), default="1")


class Specialty(Base):
    __tablename__ = "spesialis"

    kd_sps = Column(String(5), primary_key=True)
    nm_sps = Column(String(50))
