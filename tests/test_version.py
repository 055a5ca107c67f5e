from oteloperator import version


def test_fallback_version():
    assert version.open_telemetry_collector() == "0.0.0"


def test_version_from_build(monkeypatch):
    monkeypatch.setattr(version, "_otel_col", "0.0.2")
    assert version.open_telemetry_collector() == "0.0.2"
    assert "0.0.2" in str(version.get())


def test_target_allocator_fallback_version():
    assert version.target_allocator() == "0.0.0"


def test_target_allocator_version_from_build(monkeypatch):
    monkeypatch.setattr(version, "_target_allocator", "0.0.2")
    assert version.target_allocator() == "0.0.2"
    assert "0.0.2" in str(version.get())


def test_auto_instrumentation_java_fallback_version():
    assert version.auto_instrumentation_java() == "0.0.0"


def test_auto_instrumentation_nodejs_fallback_version():
    assert version.auto_instrumentation_nodejs() == "0.0.0"


def test_auto_instrumentation_python_fallback_version():
    assert version.auto_instrumentation_python() == "0.0.0"


def test_get_collects_component_versions(monkeypatch):
    monkeypatch.setattr(version, "_auto_instrumentation_java", "1.2.3")
    info = version.get()
    assert info.auto_instrumentation_java == "1.2.3"
    assert info.open_telemetry_collector == version.open_telemetry_collector()
    assert "AutoInstrumentationJava='1.2.3'" in str(info)