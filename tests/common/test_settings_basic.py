from streamstats.common.settings import get_settings


def test_settings_defaults(monkeypatch):
    for var in ("RTMP_ORIGIN", "APP_ENV", "FFPROBE__BIN", "CONCURRENCY__PROBE_WORKERS"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()

    cfg = get_settings()
    assert cfg.rtmp_origin == "rtmp://nginx-server/live"
    assert cfg.ffprobe.timeout_sec >= 1
    assert cfg.concurrency.probe_workers >= 1
    assert cfg.storage.key_prefix == "replay/"
    assert cfg.storage.content_type == "video/mp4"


def test_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("RTMP_ORIGIN", "rtmp://ingest.example/live/")
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("FFPROBE__BIN", "/usr/local/bin/ffprobe")
    monkeypatch.setenv("CONCURRENCY__PROBE_WORKERS", "2")
    monkeypatch.setenv("STORAGE__GZIP", "no")
    get_settings.cache_clear()

    cfg = get_settings()
    # trailing slash stripped so endpoints never contain "//"
    assert cfg.rtmp_origin == "rtmp://ingest.example/live"
    assert cfg.is_dev is False
    assert cfg.ffprobe.bin == "/usr/local/bin/ffprobe"
    assert cfg.concurrency.probe_workers == 2
    assert cfg.storage.gzip is False


def test_settings_cached():
    assert get_settings() is get_settings()
