import pytest


def test_compress_and_decompress_roundtrip(sample_file, tmp_path, m, capsys):
    comp_path = tmp_path / "sample.hf"
    assert m.main(["compress", str(sample_file), "-o", str(comp_path)]) == 0
    assert comp_path.exists() and comp_path.stat().st_size > 0
    assert "Compression ratio" in capsys.readouterr().out

    out_path = tmp_path / "sample.out"
    assert m.main(["d", str(comp_path), "-o", str(out_path)]) == 0
    assert out_path.read_bytes() == sample_file.read_bytes()


def test_empty_file_roundtrip(tmp_path, m):
    src = tmp_path / "empty"
    src.write_bytes(b"")
    comp_path = tmp_path / "empty.hf"
    out_path = tmp_path / "empty.out"
    assert m.compress_file(str(src), str(comp_path))
    assert m.decompress_file(str(comp_path), str(out_path))
    assert out_path.read_bytes() == b""


def test_bad_magic_removes_output(tmp_path, m, capsys):
    bad = tmp_path / "bad.hf"
    bad.write_bytes(b"BAD!" + b"\x00" * 8)
    out_path = tmp_path / "out"
    assert m.main(["decompress", str(bad), "-o", str(out_path)]) == 1
    assert not out_path.exists()
    assert capsys.readouterr().out.startswith("[!] Illegal header")


def test_truncated_file_removes_output(sample_file, tmp_path, m):
    comp_path = tmp_path / "sample.hf"
    assert m.compress_file(str(sample_file), str(comp_path))
    comp_path.write_bytes(comp_path.read_bytes()[:-40])

    out_path = tmp_path / "out"
    assert not m.decompress_file(str(comp_path), str(out_path))
    assert not out_path.exists()


def test_missing_input(tmp_path, m, capsys):
    out_path = tmp_path / "out"
    assert m.main(["c", str(tmp_path / "nope"), "-o", str(out_path)]) == 1
    assert "not found" in capsys.readouterr().out
    assert not out_path.exists()


def test_debug_flag_reports_on_stderr(sample_file, tmp_path, m, capsys):
    comp_path = tmp_path / "sample.hf"
    assert m.main(["c", str(sample_file), "-o", str(comp_path), "-d", "1"]) == 0
    assert "[DEBUG]" in capsys.readouterr().err


def test_same_input_and_output_is_refused(sample_file, m, capsys):
    original = sample_file.read_bytes()
    assert m.main(["c", str(sample_file), "-o", str(sample_file)]) == 1
    assert "same file" in capsys.readouterr().out
    assert sample_file.read_bytes() == original


def test_unexpected_error_removes_output(sample_file, tmp_path, m, monkeypatch):
    def _fail(self, in_stream, out_stream):
        out_stream.write_bits(0xFF, 8)
        out_stream.flush()
        raise OSError("disk went away")

    monkeypatch.setattr(m.HuffProcessor, "compress", _fail)
    out_path = tmp_path / "out.hf"
    with pytest.raises(OSError):
        m.main(["c", str(sample_file), "-o", str(out_path)])
    assert not out_path.exists()


def test_output_directory_missing(sample_file, tmp_path, m, capsys):
    out_path = tmp_path / "nodir" / "out.hf"
    assert m.main(["c", str(sample_file), "-o", str(out_path)]) == 1
    assert capsys.readouterr().out.startswith("[!] Cannot create output file")
    assert not out_path.exists()
