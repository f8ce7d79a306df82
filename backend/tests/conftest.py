import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.database import Base, get_db
from app.main import app
from app.models.shot import Shot
from app.models.take import Take
from app.schemas.take_snapshot import TakeSnapshotCreate
from app.services import snapshot_service

TEST_DB_URL = "sqlite:///./test_cineboard.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_shot(db):
    shot = Shot(project_id="proj-1", scene_id="scene-1", title="S01 오프닝")
    db.add(shot)
    db.commit()
    db.refresh(shot)
    return shot


@pytest.fixture
def seed_takes(db, seed_shot):
    takes = [
        Take(shot_id=seed_shot.id, name="Take 1", status="draft", order_index=0),
        Take(shot_id=seed_shot.id, name="Take 2", status="candidate", order_index=1),
    ]
    for t in takes:
        db.add(t)
    db.commit()
    for t in takes:
        db.refresh(t)
    return takes


def snapshot_data(shot: Shot, take: Take, payload, reason: str = "manual_save") -> TakeSnapshotCreate:
    return TakeSnapshotCreate(
        project_id=shot.project_id,
        scene_id=shot.scene_id,
        shot_id=shot.id,
        take_id=take.id,
        payload=payload,
        reason=reason,
        created_by="editor-1",
    )


def save_snapshot(db, shot: Shot, take: Take, payload, reason: str = "manual_save"):
    return snapshot_service.save_snapshot(db, snapshot_data(shot, take, payload, reason))
