from sqlalchemy import Column, String, Date, Time
from wardrounds.database import Base


class Patient(Base):
    __tablename__ = "pasien"

    no_rkm_medis = Column(String(15), primary_key=True)
    nm_pasien = Column(String(40))


class Insurer(Base):
    __tablename__ = "penjab"

    kd_pj = Column(String(3), primary_key=True)
    png_jawab = Column(String(30))


class Registration(Base):
    __tablename__ = "reg_periksa"

    no_rawat = Column(String(17), primary_key=True)
    no_rkm_medis = Column(String(15), index=True)
    kd_pj = Column(String(3))
    tgl_registrasi = Column(Date)


class Ward(Base):
    __tablename__ = "bangsal"

    kd_bangsal = Column(String(5), primary_key=True)
    nm_bangsal = Column(String(30))


class Room(Base):
    __tablename__ = "kamar"

    kd_kamar = Column(String(15), primary_key=True)
    kd_bangsal = Column(String(5))


class InpatientStay(Base):
    __tablename__ = "kamar_inap"

    no_rawat = Column(String(17), primary_key=True)
    tgl_masuk = Column(Date, primary_key=True)
    jam_masuk = Column(Time, primary_key=True)
    kd_kamar = Column(String(15))
    diagnosa_awal = Column(String(100))
    tgl_keluar = Column(Date)
    # "-" while the patient is still admitted
    stts_pulang = Column(String(20), default="-")


class AttendingDoctor(Base):
    __tablename__ = "dpjp_ranap"

    no_rawat = Column(String(17), primary_key=True)
    kd_dokter = Column(String(20), primary_key=True)
