from sqlalchemy import Column, String, Date, Time, Text
from wardrounds.database import Base


class ClinicalNote(Base):
    """CPPT entry. Only aggregated (count per day, latest timestamp)."""
    __tablename__ = "pemeriksaan_ranap"

    no_rawat = Column(String(17), primary_key=True)
    tgl_perawatan = Column(Date, primary_key=True)
    jam_rawat = Column(Time, primary_key=True)
    nip = Column(String(20), index=True)
    keluhan = Column(Text)
    penilaian = Column(Text)
