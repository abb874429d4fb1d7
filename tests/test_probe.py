import pytest

from branchsource.scm import FileType, Probe, all_of, always, any_of, file_exists

from fakes import MASTER_SHA, PATCH_SHA


@pytest.mark.asyncio
async def test_probe_is_bound_to_revision(yolo, yolo_connector):
    probe = Probe(yolo_connector, yolo, MASTER_SHA)
    assert await probe.stat("README.md") == FileType.REGULAR_FILE
    assert await probe.stat("/README.md") == FileType.REGULAR_FILE
    assert await probe.stat("Jenkinsfile") == FileType.ABSENT
    assert probe.call_count == 3
    assert {c[1] for c in yolo_connector.calls} == {MASTER_SHA}


@pytest.mark.asyncio
async def test_exists(yolo, yolo_connector):
    yolo_connector.files[PATCH_SHA]["docs"] = FileType.DIRECTORY
    probe = Probe(yolo_connector, yolo, PATCH_SHA)
    assert await probe.exists("docs")
    assert await probe.exists("README.md")
    assert not await probe.exists("nope")


@pytest.mark.asyncio
async def test_criteria(yolo, yolo_connector):
    yolo_connector.files[MASTER_SHA]["docs"] = FileType.DIRECTORY
    probe = Probe(yolo_connector, yolo, MASTER_SHA)

    assert await always(probe)
    assert await file_exists("README.md")(probe)
    assert not await file_exists("docs")(probe)
    assert await file_exists("docs", FileType.DIRECTORY)(probe)

    assert await all_of(file_exists("README.md"), always)(probe)
    assert not await all_of(file_exists("README.md"), file_exists("Jenkinsfile"))(
        probe
    )
    assert await any_of(file_exists("Jenkinsfile"), file_exists("README.md"))(probe)
    assert not await any_of()(probe)


@pytest.mark.asyncio
async def test_all_of_short_circuits(yolo, yolo_connector):
    probe = Probe(yolo_connector, yolo, MASTER_SHA)
    await all_of(file_exists("Jenkinsfile"), file_exists("README.md"))(probe)
    assert probe.call_count == 1
