from linear_tui.diagnostics import FileDiagnosticSink, NullSink, sink_from_env


def test_sink_from_env_defaults_to_null():
    assert isinstance(sink_from_env({}), NullSink)
    assert isinstance(sink_from_env({"DEBUG": ""}), NullSink)


def test_file_sink_appends_structured_records(tmp_path):
    path = tmp_path / "debug.log"
    path.write_text("previous run\n", encoding="utf-8")
    sink = sink_from_env({"DEBUG": "1"}, path=str(path))
    assert isinstance(sink, FileDiagnosticSink)
    try:
        sink.log_request("POST", "https://api.linear.app/graphql", {"teamId": "t1"})
        sink.log_response(200, 0.25, 512)
        sink.log_error("Request failed on attempt 1", RuntimeError("boom"))
        sink.log_info("Fetching issues for team %s", "t1")
    finally:
        sink.close()
    text = path.read_text(encoding="utf-8")
    assert text.startswith("previous run\n")
    assert '"teamId": "t1"' in text
    assert "Status: 200" in text
    assert "512 bytes" in text
    assert "Request failed on attempt 1 - boom" in text
    assert "Fetching issues for team t1" in text


def test_file_sink_swallows_formatting_errors(tmp_path):
    sink = FileDiagnosticSink(str(tmp_path / "debug.log"))
    try:
        # Bad format arguments and a non-numeric duration must not escape.
        sink.log_info("%d items", "not-a-number")
        sink.log_response(200, "slow", 1)
    finally:
        sink.close()


def test_unwritable_path_falls_back_to_null(tmp_path):
    missing_dir = tmp_path / "nope" / "debug.log"
    assert isinstance(sink_from_env({"DEBUG": "1"}, path=str(missing_dir)), NullSink)
