"""Active inpatient roster for the doctor of record (DPJP).

Each active admission is tagged with a documentation status for *today*:

- ``new``     admitted today; no CPPT is expected yet, even if one exists
- ``done``    the doctor wrote at least one CPPT today
- ``pending`` everything else

Rows come back pending first, then new, then done, and within each status by
ward, room and admission time. The summary is always built from the full
roster so dashboard totals do not move when a filtered view is requested.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from wardrounds.auth import DoctorPrincipal
from wardrounds.exceptions import AdmissionNotFound, DoctorNotFound
from wardrounds.models.admission import (
    AttendingDoctor, InpatientStay, Insurer, Patient, Registration, Room, Ward,
)
from wardrounds.models.clinical_note import ClinicalNote
from wardrounds.models.doctor import Doctor, Specialty
from wardrounds.schemas.roster import (
    AdmissionView, DoctorInfo, DoctorProfile, DocumentationStatus, RosterSummary,
)

logger = logging.getLogger(__name__)

STATUS_RANK = {
    DocumentationStatus.PENDING: 1,
    DocumentationStatus.NEW: 2,
    DocumentationStatus.DONE: 3,
}

FILTER_ALIASES = {
    "done": DocumentationStatus.DONE,
    "sudah_cppt": DocumentationStatus.DONE,
    "pending": DocumentationStatus.PENDING,
    "belum_cppt": DocumentationStatus.PENDING,
    "new": DocumentationStatus.NEW,
    "pasien_baru": DocumentationStatus.NEW,
}


def classify_documentation(admitted_on: date, notes_today: int, today: date) -> DocumentationStatus:
    if admitted_on == today:
        return DocumentationStatus.NEW
    if notes_today > 0:
        return DocumentationStatus.DONE
    return DocumentationStatus.PENDING


def normalize_filter(value: Optional[str]) -> Optional[DocumentationStatus]:
    """Map a query-string filter to a status; None (or anything unknown) means all."""
    if not value:
        return None
    return FILTER_ALIASES.get(value.strip().lower())


def summarize_roster(roster: list[AdmissionView]) -> RosterSummary:
    counts = {status: 0 for status in DocumentationStatus}
    for row in roster:
        counts[row.status_cppt] += 1

    done = counts[DocumentationStatus.DONE]
    pending = counts[DocumentationStatus.PENDING]
    # New admissions are not expected to be documented yet
    expected = done + pending
    percentage = round(done / expected * 100, 2) if expected else 0.0
    return RosterSummary(
        total=len(roster),
        done=done,
        pending=pending,
        new=counts[DocumentationStatus.NEW],
        percentage=percentage,
    )


@dataclass
class NoteAggregate:
    count_today: int = 0
    latest: Optional[datetime] = None


class RosterRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _admission_query(self, kd_dokter: str):
        return (
            select(
                InpatientStay.no_rawat,
                Patient.no_rkm_medis,
                Patient.nm_pasien,
                func.coalesce(Insurer.png_jawab, "N/A").label("penanggung_jawab"),
                Room.kd_kamar,
                Ward.nm_bangsal,
                InpatientStay.diagnosa_awal,
                InpatientStay.tgl_masuk,
                InpatientStay.jam_masuk,
                Doctor.kd_dokter,
                Doctor.nm_dokter,
                Doctor.no_telp,
            )
            .select_from(InpatientStay)
            .join(Registration, Registration.no_rawat == InpatientStay.no_rawat)
            .join(Patient, Patient.no_rkm_medis == Registration.no_rkm_medis)
            .join(AttendingDoctor, AttendingDoctor.no_rawat == InpatientStay.no_rawat)
            .join(Doctor, Doctor.kd_dokter == AttendingDoctor.kd_dokter)
            .join(Room, Room.kd_kamar == InpatientStay.kd_kamar)
            .join(Ward, Ward.kd_bangsal == Room.kd_bangsal)
            .outerjoin(Insurer, Insurer.kd_pj == Registration.kd_pj)
            .where(InpatientStay.stts_pulang == "-", Doctor.kd_dokter == kd_dokter)
        )

    async def fetch_active_admissions(self, kd_dokter: str) -> list:
        query = self._admission_query(kd_dokter).order_by(
            Ward.nm_bangsal, Room.kd_kamar, InpatientStay.tgl_masuk, InpatientStay.jam_masuk,
        )
        result = await self.db.execute(query)
        return result.all()

    async def fetch_active_admission(self, kd_dokter: str, no_rawat: str):
        query = self._admission_query(kd_dokter).where(InpatientStay.no_rawat == no_rawat)
        result = await self.db.execute(query.limit(1))
        return result.first()

    async def fetch_note_aggregates(
        self, kd_dokter: str, no_rawat_list: list[str], today: date
    ) -> dict[str, NoteAggregate]:
        """Per admission: this doctor's CPPT count for today and latest CPPT time."""
        if not no_rawat_list:
            return {}
        query = (
            select(
                ClinicalNote.no_rawat,
                ClinicalNote.tgl_perawatan,
                func.count().label("jumlah"),
                func.max(ClinicalNote.jam_rawat).label("jam_terakhir"),
            )
            .where(ClinicalNote.nip == kd_dokter, ClinicalNote.no_rawat.in_(no_rawat_list))
            .group_by(ClinicalNote.no_rawat, ClinicalNote.tgl_perawatan)
        )
        result = await self.db.execute(query)

        aggregates: dict[str, NoteAggregate] = {}
        for no_rawat, tgl, jumlah, jam in result.all():
            agg = aggregates.setdefault(no_rawat, NoteAggregate())
            if tgl == today:
                agg.count_today += jumlah
            if jam is not None:
                stamp = datetime.combine(tgl, jam)
                if agg.latest is None or stamp > agg.latest:
                    agg.latest = stamp
        return aggregates

    async def fetch_doctor_profile(self, kd_dokter: str):
        query = (
            select(Doctor.kd_dokter, Doctor.nm_dokter, Doctor.no_telp, Specialty.nm_sps)
            .outerjoin(Specialty, Specialty.kd_sps == Doctor.kd_sps)
            .where(Doctor.kd_dokter == kd_dokter)
        )
        result = await self.db.execute(query)
        return result.first()


class RosterService:
    def __init__(self, repository: RosterRepository):
        self.repository = repository

    def _to_view(self, row, aggregate: Optional[NoteAggregate], today: date) -> AdmissionView:
        aggregate = aggregate or NoteAggregate()
        return AdmissionView(
            no_rawat=row.no_rawat,
            no_rkm_medis=row.no_rkm_medis,
            nm_pasien=row.nm_pasien or "",
            penanggung_jawab=row.penanggung_jawab,
            kd_dokter=row.kd_dokter,
            nm_dokter=row.nm_dokter or "",
            no_telp=row.no_telp,
            kd_kamar=row.kd_kamar,
            nm_bangsal=row.nm_bangsal or "",
            diagnosa_awal=row.diagnosa_awal,
            tgl_masuk=row.tgl_masuk,
            jam_masuk=row.jam_masuk,
            jumlah_cppt_hari_ini=aggregate.count_today,
            cppt_hari_ini=aggregate.count_today > 0,
            cppt_terakhir=aggregate.latest,
            status_cppt=classify_documentation(row.tgl_masuk, aggregate.count_today, today),
        )

    async def fetch_roster(self, kd_dokter: str, today: date) -> list[AdmissionView]:
        rows = await self.repository.fetch_active_admissions(kd_dokter)
        aggregates = await self.repository.fetch_note_aggregates(
            kd_dokter, [row.no_rawat for row in rows], today
        )
        roster = [self._to_view(row, aggregates.get(row.no_rawat), today) for row in rows]
        # Stable sort keeps ward/room/admission order within each status
        roster.sort(key=lambda view: STATUS_RANK[view.status_cppt])
        logger.info("Roster for dokter=%s: %d active patient(s)", kd_dokter, len(roster))
        return roster

    async def roster_with_summary(
        self, kd_dokter: str, today: date, status: Optional[DocumentationStatus] = None
    ) -> tuple[list[AdmissionView], RosterSummary]:
        full_roster = await self.fetch_roster(kd_dokter, today)
        summary = summarize_roster(full_roster)
        if status is None:
            return full_roster, summary
        return [view for view in full_roster if view.status_cppt == status], summary

    async def admission_detail(self, kd_dokter: str, no_rawat: str, today: date) -> AdmissionView:
        row = await self.repository.fetch_active_admission(kd_dokter, no_rawat)
        if row is None:
            raise AdmissionNotFound(no_rawat)
        aggregates = await self.repository.fetch_note_aggregates(kd_dokter, [no_rawat], today)
        return self._to_view(row, aggregates.get(no_rawat), today)

    async def doctor_profile(self, kd_dokter: str) -> DoctorProfile:
        row = await self.repository.fetch_doctor_profile(kd_dokter)
        if row is None:
            raise DoctorNotFound(kd_dokter)
        return DoctorProfile(
            kd_dokter=row.kd_dokter,
            nm_dokter=row.nm_dokter or "",
            no_telp=row.no_telp,
            spesialisasi=row.nm_sps,
        )

    async def doctor_info(self, principal: DoctorPrincipal, listed_at: datetime, zone_label: str) -> DoctorInfo:
        """Header block for the roster, read from the doctor row."""
        row = await self.repository.fetch_doctor_profile(principal.kd_dokter)
        return DoctorInfo(
            kd_dokter=principal.kd_dokter,
            nm_dokter=(row.nm_dokter if row else None) or principal.nm_dokter,
            no_telp=row.no_telp if row else None,
            tanggal_list=f"{listed_at.strftime('%d-%m-%Y %H:%M:%S')} {zone_label}",
        )
