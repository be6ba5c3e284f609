from datetime import date

from planviewer.model.recent_files import RecentFile, RecentFiles, format_file_size


def test_format_file_size():
    assert format_file_size(0) == "0 B"
    assert format_file_size(1023) == "1023 B"
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(5 * 1024 * 1024) == "5.0 MB"


def test_newest_first_and_deduplicated():
    recent = RecentFiles()
    for name in ("a.json", "b.json", "a.json"):
        recent.add(f"/plans/{name}", size_bytes=10, opened=date(2024, 5, 1))
    assert [e.name for e in recent.entries()] == ["a.json", "b.json"]


def test_limit():
    recent = RecentFiles(limit=5)
    for i in range(8):
        recent.add(f"/plans/{i}.json", size_bytes=1)
    assert len(recent) == 5
    assert recent.entries()[0].path == "/plans/7.json"
    assert recent.entries()[-1].path == "/plans/3.json"


def test_entry_contents():
    recent = RecentFiles()
    entry = recent.add("/plans/floor.json", size_bytes=2048, opened=date(2024, 1, 31))
    assert entry == RecentFile(path="/plans/floor.json", size="2.0 KB", opened="2024-01-31")


def test_size_from_disk(tmp_path):
    path = tmp_path / "p.json"
    path.write_bytes(b"x" * 100)
    entry = RecentFiles().add(str(path))
    assert entry.size == "100 B"
    assert entry.opened == date.today().isoformat()


def test_remove():
    recent = RecentFiles()
    recent.add("/a.json", size_bytes=1)
    recent.add("/b.json", size_bytes=1)
    recent.remove("/a.json")
    assert [e.path for e in recent.entries()] == ["/b.json"]


def test_serialization_skips_bad_entries():
    recent = RecentFiles()
    recent.add("/a.json", size_bytes=1, opened=date(2024, 1, 1))
    raw = recent.to_list() + [{"size": "1 B"}, "garbage"]

    restored = RecentFiles.from_list(raw)
    assert restored.entries() == recent.entries()
