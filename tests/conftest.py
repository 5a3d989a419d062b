import asyncio
from datetime import date, datetime, time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

from wardrounds.config import Settings
from wardrounds.database import Base, build_engine, build_session_factory
from wardrounds.main import create_app
from wardrounds.models import (
    AttendingDoctor, ClinicalNote, Doctor, InpatientStay, Insurer, NotificationQueue,
    Patient, Registration, Room, Specialty, User, Ward,
)
from wardrounds.services.credential_cipher import mysql_aes_encrypt
from wardrounds.time_utils import local_today

JWT_SECRET = "test-secret"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'sik.db'}",
        environment="test",
        timezone="UTC",
        jwt_secret=JWT_SECRET,
        onesignal_app_id="app-123",
        onesignal_api_key="key-456",
        frontend_url="https://ranap.example.org",
        notification_worker_enabled=False,
    )


@pytest.fixture
def session_factory(settings):
    engine = build_engine(settings, poolclass=NullPool)

    async def create_all():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_all())
    yield build_session_factory(engine)
    asyncio.run(engine.dispose())


@pytest.fixture
def seed(session_factory):
    """Insert ORM objects: ``seed(obj, obj, ...)``."""

    def _seed(*objects):
        async def _run():
            async with session_factory() as db:
                db.add_all(objects)
                await db.commit()

        asyncio.run(_run())

    return _seed


@pytest.fixture
def today(settings) -> date:
    return local_today(settings)


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.state.engine = build_engine(settings, poolclass=NullPool)
    app.state.session_factory = build_session_factory(app.state.engine)
    return app


@pytest.fixture
def client(app, session_factory):
    # session_factory creates the schema before the first request
    return TestClient(app)


def make_user(id_user: str, password: str, settings: Settings) -> User:
    return User(
        id_user=mysql_aes_encrypt(id_user, settings.credential_id_key),
        password=mysql_aes_encrypt(password, settings.credential_password_key),
    )


@pytest.fixture
def ward_fixtures(seed, settings):
    """Reference data: two doctors with logins, one ward with rooms, one insurer."""
    seed(
        Specialty(kd_sps="S0001", nm_sps="Penyakit Dalam"),
        Doctor(kd_dokter="D01", nm_dokter="dr. Andi, Sp.PD", no_telp="0811111", kd_sps="S0001"),
        Doctor(kd_dokter="D02", nm_dokter="dr. Budi", no_telp="0822222"),
        make_user("D01", "rahasia", settings),
        make_user("D02", "lain", settings),
        Ward(kd_bangsal="B01", nm_bangsal="Anggrek"),
        Ward(kd_bangsal="B02", nm_bangsal="Melati"),
        Room(kd_kamar="ANG-1", kd_bangsal="B01"),
        Room(kd_kamar="ANG-2", kd_bangsal="B01"),
        Room(kd_kamar="MEL-1", kd_bangsal="B02"),
        Insurer(kd_pj="BPJ", png_jawab="BPJS Kesehatan"),
    )


@pytest.fixture
def admit(seed):
    """Create an active (or discharged) admission assigned to ``kd_dokter``."""

    def _admit(no_rawat, kd_dokter, admitted_on, kd_kamar="ANG-1", kd_pj="BPJ",
               stts_pulang="-", jam_masuk=time(8, 0), nm_pasien=None):
        no_rkm_medis = "RM" + no_rawat.replace("/", "")
        seed(
            Patient(no_rkm_medis=no_rkm_medis, nm_pasien=nm_pasien or f"Pasien {no_rawat}"),
            Registration(no_rawat=no_rawat, no_rkm_medis=no_rkm_medis, kd_pj=kd_pj,
                         tgl_registrasi=admitted_on),
            InpatientStay(no_rawat=no_rawat, tgl_masuk=admitted_on, jam_masuk=jam_masuk,
                          kd_kamar=kd_kamar, diagnosa_awal="Observasi febris",
                          stts_pulang=stts_pulang),
            AttendingDoctor(no_rawat=no_rawat, kd_dokter=kd_dokter),
        )

    return _admit


@pytest.fixture
def write_note(seed):
    def _write_note(no_rawat, nip, on, at=time(9, 0)):
        seed(ClinicalNote(no_rawat=no_rawat, tgl_perawatan=on, jam_rawat=at, nip=nip,
                          keluhan="S", penilaian="A"))

    return _write_note


@pytest.fixture
def login(client, ward_fixtures):
    def _login(id_user="D01", password="rahasia"):
        resp = client.post("/api/v1/auth/login", json={"id_user": id_user, "password": password})
        assert resp.status_code == 200, resp.text
        return resp.json()["data"]["token"]

    return _login


@pytest.fixture
def auth_headers(login):
    return {"Authorization": f"Bearer {login()}"}


def queue_entry(kd_dokter="D01", title="CPPT", body="Pasien belum CPPT hari ini",
                no_rawat="2024/05/01/000001", created_at=None, status="pending"):
    return NotificationQueue(
        kd_dokter=kd_dokter, title=title, body=body, no_rawat=no_rawat, status=status,
        created_at=created_at or datetime(2024, 5, 1, 7, 0),
    )


