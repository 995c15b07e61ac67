import pytest

from clipscribe.domain.models import Project, Video
from clipscribe.repositories.project_repository import SqlProjectRepository
from clipscribe.repositories.video_repository import SqlVideoRepository


@pytest.fixture
def repo(session):
    projects = SqlProjectRepository(session)
    projects.save(Project(id="p-alice", user_id="alice", project_title="A"))
    projects.save(Project(id="p-alice-2", user_id="alice", project_title="A2"))
    projects.save(Project(id="p-bob", user_id="bob", project_title="B"))
    return SqlVideoRepository(session)


def test_save_and_find_owned(repo):
    """Test saving a video and finding it through its project's owner."""
    saved = repo.save(Video(id="v1", project_id="p-alice", storage_path="videos/a.mp4"))

    assert saved.status == "uploaded"
    assert saved.created_at is not None
    assert repo.find_owned("v1", "alice").storage_path == "videos/a.mp4"
    assert repo.find_owned("v1", "bob") is None


def test_transcript_fields_round_trip(repo):
    video = repo.save(Video(id="v1", project_id="p-alice", storage_path="a.mp4"))

    words = [{"word": "hi", "start": 0.0, "end": 0.4, "confidence": 0.9}]
    video.mark_as_transcribed({"transcript": "hi"}, words)
    repo.save(video)

    found = repo.find_owned("v1", "alice")
    assert found.status == "transcribed"
    assert found.transcript_text == {"transcript": "hi"}
    assert found.transcript_data_full == words


def test_save_can_clear_transcript(repo):
    video = repo.save(
        Video(
            id="v1",
            project_id="p-alice",
            storage_path="a.mp4",
            transcript_text="hello",
            transcript_data_full=[{"word": "hello", "start": 0, "end": 1}],
        )
    )

    video.transcript_text = None
    video.transcript_data_full = None
    repo.save(video)

    found = repo.find_owned("v1", "alice")
    assert found.transcript_text is None
    assert found.transcript_data_full is None


def test_find_by_project_and_user(repo):
    repo.save(Video(id="v1", project_id="p-alice", storage_path="1.mp4"))
    repo.save(Video(id="v2", project_id="p-alice-2", storage_path="2.mp4"))
    repo.save(Video(id="v3", project_id="p-bob", storage_path="3.mp4"))

    assert [v.id for v in repo.find_by_project("p-alice")] == ["v1"]
    assert {v.id for v in repo.find_by_user("alice")} == {"v1", "v2"}
    assert [v.id for v in repo.find_by_user("bob")] == ["v3"]


def test_find_by_request_id(repo):
    video = repo.save(Video(id="v1", project_id="p-alice", storage_path="1.mp4"))
    video.mark_as_transcribing("req-1")
    repo.save(video)

    found = repo.find_by_request_id("req-1")

    assert [v.id for v in found] == ["v1"]
    assert found[0].status == "transcribing"
    assert repo.find_by_request_id("req-unknown") == []


def test_find_by_storage_path(repo):
    repo.save(Video(id="v1", project_id="p-alice", storage_path="videos/p-alice/a.mp4"))
    repo.save(Video(id="v2", project_id="p-alice-2", storage_path="videos/p-alice/a.mp4"))
    repo.save(Video(id="v3", project_id="p-alice", storage_path="videos/p-alice/b.mp4"))

    found = repo.find_by_storage_path("videos/p-alice/a.mp4")

    assert sorted(v.id for v in found) == ["v1", "v2"]
    assert repo.find_by_storage_path("videos/p-alice/none.mp4") == []


def test_delete(repo):
    repo.save(Video(id="v1", project_id="p-alice", storage_path="1.mp4"))

    assert repo.delete("v1") is True
    assert repo.delete("v1") is False
