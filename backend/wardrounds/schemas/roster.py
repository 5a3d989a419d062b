from enum import Enum
from pydantic import BaseModel
from datetime import date, datetime, time
from typing import Optional


class DocumentationStatus(str, Enum):
    NEW = "new"          # admitted today
    DONE = "done"        # at least one CPPT by this doctor today
    PENDING = "pending"  # neither


class AdmissionView(BaseModel):
    no_rawat: str
    no_rkm_medis: str
    nm_pasien: str
    penanggung_jawab: str = "N/A"
    kd_dokter: str
    nm_dokter: str
    no_telp: Optional[str] = None
    kd_kamar: str
    nm_bangsal: str
    diagnosa_awal: Optional[str] = None
    tgl_masuk: date
    jam_masuk: Optional[time] = None
    jumlah_cppt_hari_ini: int = 0
    cppt_hari_ini: bool = False
    cppt_terakhir: Optional[datetime] = None
    status_cppt: DocumentationStatus


class RosterSummary(BaseModel):
    total: int
    done: int
    pending: int
    new: int
    percentage: float


class DoctorInfo(BaseModel):
    kd_dokter: str
    nm_dokter: str
    no_telp: Optional[str] = None
    tanggal_list: str


class RosterResponse(BaseModel):
    status: str = "success"
    message: str
    filter: str
    total: int
    data: list[AdmissionView]
    dokter_info: DoctorInfo
    cppt_summary: RosterSummary


class AdmissionDetailResponse(BaseModel):
    status: str = "success"
    data: AdmissionView


class DoctorProfile(BaseModel):
    kd_dokter: str
    nm_dokter: str
    no_telp: Optional[str] = None
    spesialisasi: Optional[str] = None


class DoctorProfileResponse(BaseModel):
    status: str = "success"
    message: str = "Doctor profile retrieved successfully"
    data: DoctorProfile
