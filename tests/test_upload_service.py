"""Tests for the upload orchestrator against an in-memory gist host."""

import pytest

from common.errors import ChunkingError
from common.types import BinaryObject, ChunkLocator, UploadPart, UploadState
from uploader.exceptions import InvalidPartError, NoPartsProvidedError, UploadError
from uploader.services.upload_service import select_media_locators
from uploader.workspace import ScratchWorkspace

MB = 1024 * 1024
GIST = 'https://gist.github.com/abc123'
RAW = 'https://gist.githubusercontent.com/user/abc123/raw'


def _parts(count, size=4):
    return [
        UploadPart(filename=f'rec-part{i + 1}of{count}.webm', data=bytes([i]) * size)
        for i in range(count)
    ]


def _kinds(events):
    return [event[0] for event in events]


@pytest.mark.asyncio
async def test_single_small_recording(fake_client, service_factory, scratch_root):
    """A 2MB recording is one file, one push, and a one-locator reference."""
    service = service_factory(fake_client)

    reference = await service.upload(
        BinaryObject(data=b'v' * (2 * MB), media_type='video/webm'),
        'Video recording',
    )

    assert reference.value == f'{GIST}|{RAW}/recording.webm'
    assert fake_client.events == [
        ('create', 'Video recording'),
        ('clone', 'abc123'),
        ('commit', 0, 'Add chunk 1/1: recording.webm'),
        ('push', 0),
        ('list', 'abc123'),
    ]
    assert list(scratch_root.iterdir()) == []


@pytest.mark.asyncio
async def test_multi_part_recording_pushed_in_order_with_pacing(fake_client, service_factory, scratch_root):
    """20MB becomes three parts pushed one by one with a pause between pushes."""
    data = b''.join(bytes([i]) * (7 * MB) for i in range(3))[:20 * MB]
    service = service_factory(fake_client)

    reference = await service.upload(BinaryObject(data=data, media_type='video/webm'), 'Demo')

    names = [f'recording-part{i}of3.webm' for i in (1, 2, 3)]
    assert fake_client.pushed == names
    assert _kinds(fake_client.events) == [
        'create', 'clone',
        'commit', 'push', 'sleep',
        'commit', 'push', 'sleep',
        'commit', 'push',
        'list',
    ]
    assert ('sleep', 5) in fake_client.events
    assert reference.locator_urls == tuple(f'{RAW}/{name}' for name in names)
    assert b''.join(fake_client.remote_files[name] for name in names) == data
    assert list(scratch_root.iterdir()) == []


@pytest.mark.asyncio
async def test_commit_messages_name_each_part(fake_client, service_factory):
    service = service_factory(fake_client)

    await service.upload_parts(_parts(2), 'Demo')

    messages = [event[2] for event in fake_client.events if event[0] == 'commit']
    assert messages == [
        'Add chunk 1/2: rec-part1of2.webm',
        'Add chunk 2/2: rec-part2of2.webm',
    ]


@pytest.mark.asyncio
async def test_manifest_created_before_any_chunk(fake_client, service_factory):
    """The gist starts with a README listing every intended part."""
    service = service_factory(fake_client)

    result = await service.upload_parts(_parts(2), 'Demo')

    manifest = fake_client.remote_files['README.md'].decode()
    assert manifest.startswith('# Demo')
    assert 'split into 2 parts' in manifest
    assert '- rec-part1of2.webm' in manifest
    assert [f.filename for f in result.files] == ['README.md', 'rec-part1of2.webm', 'rec-part2of2.webm']
    assert [loc.filename for loc in result.locators] == ['rec-part1of2.webm', 'rec-part2of2.webm']


@pytest.mark.asyncio
async def test_failure_mid_upload_keeps_pushed_parts(fake_client_factory, service_factory, scratch_root):
    """Push of part 2 fails: part 1 stays in the gist, the error names part 2, scratch space is gone."""
    client = fake_client_factory(fail_stage='push', fail_at_chunk=1)
    service = service_factory(client)

    with pytest.raises(UploadError) as exc_info:
        await service.upload_parts(_parts(3), 'Demo')

    error = exc_info.value
    assert error.stage == 'push'
    assert error.chunk_index == 1
    assert error.total_chunks == 3
    assert error.container_url == GIST
    assert 'part 2 of 3' in str(error)
    assert client.pushed == ['rec-part1of3.webm']
    assert 'rec-part1of3.webm' in client.remote_files
    assert client.events[-1] == ('push', 1)
    assert list(scratch_root.iterdir()) == []
    assert service.last_attempt.state == UploadState.FAILED
    assert service.last_attempt.pushed_chunks == 1


@pytest.mark.asyncio
async def test_create_failure_has_no_workspace(fake_client_factory, service_factory, scratch_root):
    client = fake_client_factory(fail_stage='container-create')
    service = service_factory(client)

    with pytest.raises(UploadError) as exc_info:
        await service.upload_parts(_parts(1), 'Demo')

    assert exc_info.value.stage == 'container-create'
    assert exc_info.value.container_url is None
    assert exc_info.value.chunk_index is None
    assert _kinds(client.events) == ['create']
    assert list(scratch_root.iterdir()) == []


@pytest.mark.asyncio
async def test_clone_failure_cleans_up(fake_client_factory, service_factory, scratch_root):
    client = fake_client_factory(fail_stage='clone')
    service = service_factory(client)

    with pytest.raises(UploadError) as exc_info:
        await service.upload_parts(_parts(2), 'Demo')

    assert exc_info.value.stage == 'clone'
    assert exc_info.value.container_url == GIST
    assert not client.workspaces[0].path.exists()
    assert list(scratch_root.iterdir()) == []


@pytest.mark.asyncio
async def test_commit_failure_stops_before_push(fake_client_factory, service_factory, scratch_root):
    client = fake_client_factory(fail_stage='commit', fail_at_chunk=0)
    service = service_factory(client)

    with pytest.raises(UploadError) as exc_info:
        await service.upload_parts(_parts(2), 'Demo')

    assert exc_info.value.stage == 'commit'
    assert exc_info.value.chunk_index == 0
    assert 'push' not in _kinds(client.events)
    assert list(scratch_root.iterdir()) == []


@pytest.mark.asyncio
async def test_list_failure_after_all_pushes(fake_client_factory, service_factory, scratch_root):
    client = fake_client_factory(fail_stage='list')
    service = service_factory(client)

    with pytest.raises(UploadError) as exc_info:
        await service.upload_parts(_parts(2), 'Demo')

    assert exc_info.value.stage == 'list'
    assert client.pushed == ['rec-part1of2.webm', 'rec-part2of2.webm']
    assert list(scratch_root.iterdir()) == []


@pytest.mark.asyncio
async def test_step_timeout_becomes_upload_error(fake_client_factory, service_factory, scratch_root):
    """A hung push is abandoned after the step deadline."""
    client = fake_client_factory(hang_stage='push', fail_at_chunk=0)
    service = service_factory(client, step_timeout=0.05)

    with pytest.raises(UploadError) as exc_info:
        await service.upload_parts(_parts(2), 'Demo')

    assert exc_info.value.stage == 'push'
    assert exc_info.value.chunk_index == 0
    assert 'Timed out' in exc_info.value.detail
    assert client.pushed == []
    assert list(scratch_root.iterdir()) == []


@pytest.mark.asyncio
async def test_unexpected_exception_wrapped(fake_client_factory, service_factory):
    client = fake_client_factory(unexpected_stage='list')
    service = service_factory(client)

    with pytest.raises(UploadError) as exc_info:
        await service.upload_parts(_parts(1), 'Demo')

    assert exc_info.value.stage == 'list'
    assert 'RuntimeError' in exc_info.value.detail
    assert isinstance(exc_info.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_no_parts_rejected_before_remote_calls(fake_client, service_factory):
    service = service_factory(fake_client)

    with pytest.raises(NoPartsProvidedError):
        await service.upload_parts([], 'Demo')

    assert fake_client.events == []


@pytest.mark.asyncio
@pytest.mark.parametrize('names', [
    ['../escape.webm'],
    ['README.md'],
    [''],
    ['a.webm', 'a.webm'],
])
async def test_invalid_part_names_rejected(fake_client, service_factory, names):
    service = service_factory(fake_client)
    parts = [UploadPart(filename=name, data=b'x') for name in names]

    with pytest.raises(InvalidPartError):
        await service.upload_parts(parts, 'Demo')

    assert fake_client.events == []


@pytest.mark.asyncio
async def test_chunking_error_before_remote_calls(fake_client, service_factory):
    """A bad chunk ceiling fails locally without creating a gist."""
    service = service_factory(fake_client, chunk_size=0)

    with pytest.raises(ChunkingError):
        await service.upload(BinaryObject(data=b'abc', media_type='video/webm'), 'Demo')

    assert fake_client.events == []


@pytest.mark.asyncio
async def test_state_history_for_successful_attempt(fake_client, service_factory):
    service = service_factory(fake_client)

    await service.upload_parts(_parts(2), 'Demo')

    assert service.last_attempt.history == [
        (UploadState.CREATING, None),
        (UploadState.CLONING, None),
        (UploadState.COMMITTING, 0),
        (UploadState.PUSHING, 0),
        (UploadState.COMMITTING, 1),
        (UploadState.PUSHING, 1),
        (UploadState.LISTING, None),
        (UploadState.DONE, None),
    ]
    assert service.last_attempt.pushed_chunks == 2


@pytest.mark.asyncio
async def test_pushed_bytes_reassemble_to_recording(fake_client, service_factory):
    data = bytes(range(200))
    service = service_factory(fake_client, chunk_size=64)

    reference = await service.upload(BinaryObject(data=data, media_type='audio/ogg'), 'Demo', base_name='note')

    assert len(reference.locators) == 4
    names = [locator.filename for locator in reference.locators]
    assert names[0] == 'note-part1of4.ogg'
    assert b''.join(fake_client.remote_files[name] for name in names) == data


def test_select_media_locators_uses_commit_order():
    """Part 10 sorts before part 2 alphabetically; commit order wins."""
    committed = [f'r-part{i}of12.webm' for i in range(1, 13)]
    listing = [ChunkLocator(filename=name, url=f'{RAW}/{name}', size=1) for name in sorted(committed)]
    listing.insert(0, ChunkLocator(filename='README.md', url=f'{RAW}/README.md', size=1))
    listing.append(ChunkLocator(filename='notes.txt', url=f'{RAW}/notes.txt', size=1))

    selected = select_media_locators(listing, committed)

    assert [loc.filename for loc in selected] == committed


def test_select_media_locators_keeps_unknown_media_last():
    listing = [
        ChunkLocator(filename='extra.mp4', url=f'{RAW}/extra.mp4', size=1),
        ChunkLocator(filename='a.webm', url=f'{RAW}/a.webm', size=1),
    ]

    selected = select_media_locators(listing, ['a.webm'])

    assert [loc.filename for loc in selected] == ['a.webm', 'extra.mp4']


def test_select_media_locators_ignores_inner_extension():
    listing = [
        ChunkLocator(filename='notes.mov.md', url=f'{RAW}/notes.mov.md', size=1),
        ChunkLocator(filename='clip.MOV', url=f'{RAW}/clip.MOV', size=1),
    ]

    selected = select_media_locators(listing)

    assert [loc.filename for loc in selected] == ['clip.MOV']


def test_select_media_locators_missing_committed_file():
    listing = [ChunkLocator(filename='a.webm', url=f'{RAW}/a.webm', size=1)]

    with pytest.raises(UploadError) as exc_info:
        select_media_locators(listing, ['a.webm', 'b.webm'], GIST)

    assert exc_info.value.stage == 'list'
    assert exc_info.value.container_url == GIST
    assert 'b.webm' in exc_info.value.detail


@pytest.mark.asyncio
async def test_media_type_outside_known_extensions(fake_client, service_factory):
    """A pushed part is playable even when its extension is not a common video one."""
    service = service_factory(fake_client)

    reference = await service.upload(
        BinaryObject(data=b'q' * 1024, media_type='video/quicktime'),
        'Screen capture',
    )

    assert fake_client.pushed == ['recording.quicktime']
    assert reference.value == f'{GIST}|{RAW}/recording.quicktime'
    assert len(reference.locators) == 1


@pytest.mark.asyncio
async def test_pushed_part_missing_from_listing(fake_client_factory, service_factory, scratch_root):
    class DroppingClient(fake_client_factory):
        async def list(self, container):
            files = await super().list(container)
            return [locator for locator in files if locator.filename != 'rec-part2of2.webm']

    client = DroppingClient()
    service = service_factory(client)

    with pytest.raises(UploadError) as exc_info:
        await service.upload_parts(_parts(2), 'Demo')

    assert exc_info.value.stage == 'list'
    assert exc_info.value.container_url == GIST
    assert service.last_attempt.state == UploadState.FAILED
    assert list(scratch_root.iterdir()) == []


@pytest.mark.asyncio
async def test_scratch_write_failure_reports_gist(fake_client, service_factory, scratch_root, monkeypatch):
    def fail_stage_part(self, part):
        raise OSError('No space left on device')

    monkeypatch.setattr(ScratchWorkspace, 'stage_part', fail_stage_part)
    service = service_factory(fake_client)

    with pytest.raises(UploadError) as exc_info:
        await service.upload_parts(_parts(2), 'Demo')

    assert exc_info.value.stage == 'clone'
    assert exc_info.value.container_url == GIST
    assert 'No space left' in exc_info.value.detail
    assert _kinds(fake_client.events) == ['create']
    assert list(scratch_root.iterdir()) == []
