from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from wardrounds.database import get_db
from wardrounds.config import Settings
from wardrounds.auth import DoctorPrincipal, get_app_settings, get_current_doctor
from wardrounds.exceptions import AdmissionNotFound, DoctorNotFound
from wardrounds.schemas.roster import (
    AdmissionDetailResponse, DoctorProfileResponse, RosterResponse,
)
from wardrounds.services.roster_service import RosterRepository, RosterService, normalize_filter
from wardrounds.time_utils import local_now, zone_label

router = APIRouter()


def get_roster_service(db: AsyncSession = Depends(get_db)) -> RosterService:
    return RosterService(RosterRepository(db))


@router.get("/profile", response_model=DoctorProfileResponse)
async def doctor_profile(
    service: RosterService = Depends(get_roster_service),
    current_doctor: DoctorPrincipal = Depends(get_current_doctor),
):
    try:
        profile = await service.doctor_profile(current_doctor.kd_dokter)
    except DoctorNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return DoctorProfileResponse(data=profile)


@router.get("/pasien", response_model=RosterResponse)
async def list_active_patients(
    filter: str = Query("all", description="all | sudah_cppt | belum_cppt | pasien_baru"),
    service: RosterService = Depends(get_roster_service),
    settings: Settings = Depends(get_app_settings),
    current_doctor: DoctorPrincipal = Depends(get_current_doctor),
):
    now = local_now(settings)
    status = normalize_filter(filter)
    roster, summary = await service.roster_with_summary(current_doctor.kd_dokter, now.date(), status)

    return RosterResponse(
        message=f"Found {len(roster)} active patients",
        filter=status.value if status else "all",
        total=len(roster),
        data=roster,
        dokter_info=await service.doctor_info(current_doctor, now, zone_label(settings, now)),
        cppt_summary=summary,
    )


@router.get("/pasien/{no_rawat:path}", response_model=AdmissionDetailResponse)
async def get_active_patient(
    no_rawat: str,
    service: RosterService = Depends(get_roster_service),
    settings: Settings = Depends(get_app_settings),
    current_doctor: DoctorPrincipal = Depends(get_current_doctor),
):
    no_rawat = no_rawat.strip("/")
    if not no_rawat:
        raise HTTPException(status_code=400, detail="Missing 'no_rawat' parameter")
    try:
        admission = await service.admission_detail(
            current_doctor.kd_dokter, no_rawat, local_now(settings).date()
        )
    except AdmissionNotFound as e:
        # Same answer whether the admission is missing or belongs to another DPJP
        raise HTTPException(status_code=404, detail=str(e))
    return AdmissionDetailResponse(data=admission)
