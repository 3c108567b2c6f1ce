"""
End-to-End Tests - Full workflows from building cards through conversion and the CLI.
"""

import json
import os
import subprocess
import sys
import tempfile
from pathlib import Path

import pytest

from vcard.card import Card, Property
from vcard.reader import VCardReader
from vcard.writer import VCardWriter
from vcard import converters


PROJECT_ROOT = str(Path(__file__).parent.parent)

SAMPLE = (
    "BEGIN:VCARD\r\n"
    "VERSION:3.0\r\n"
    "N:Gump;Forrest;;Mr.;\r\n"
    "FN:Forrest Gump\r\n"
    "TEL;TYPE=WORK,VOICE:(111) 555-1212\r\n"
    "LABEL;TYPE=HOME:42 Plantation St.\\nBaytown\\, LA 30314\\nUnited States of Am\r\n"
    " erica\r\n"
    "END:VCARD\r\n"
    "BEGIN:VCARD\r\n"
    "VERSION:3.0\r\n"
    "FN:Bubba Blue\r\n"
    "END:VCARD\r\n"
)


def _run(*args, env=None):
    return subprocess.run(
        [sys.executable, "-m", "vcard.cli", *args],
        capture_output=True,
        text=True,
        cwd=PROJECT_ROOT,
        env=env,
    )


@pytest.fixture
def sample_path():
    with tempfile.NamedTemporaryFile(mode="wb", suffix=".vcf", delete=False) as f:
        f.write(SAMPLE.encode("utf-8"))
        path = f.name
    yield path
    os.unlink(path)


class TestFullWorkflow:
    """Test complete user workflows end-to-end."""

    def test_build_write_read_cycle(self):
        """Build cards, write them, read them back, verify everything matches."""
        card = Card()
        card.add("VERSION", Property(["4.0"]))
        card.add("FN", Property(["Jenny Curran"]))
        card.add("EMAIL", Property(["jenny@example.com"], params={"TYPE": ["home"]}))
        card.add("NOTE", Property(["Likes, among other things:\nrunning; and shrimp"]))
        card.add("X-NICK", Property(["Jen", "J"], group="item1"))

        with tempfile.TemporaryDirectory() as tmp:
            path = str(Path(tmp) / "jenny.vcf")
            VCardWriter.write(card, path)

            assert VCardReader.is_vcard(path)
            loaded = VCardReader.read(path)
            assert loaded == [card]
            assert loaded[0].value("NOTE") == "Likes, among other things:\nrunning; and shrimp"
            assert loaded[0].get("X-NICK")[0].group == "ITEM1"

    def test_edit_and_rewrite(self, sample_path):
        cards = VCardReader.read(sample_path)
        cards[1].add("TEL", Property(["(404) 555-0000"], params={"TYPE": ["CELL"]}))
        cards[0].remove("LABEL")
        VCardWriter.write(cards, sample_path)

        reread = VCardReader.read(sample_path)
        assert reread == cards
        assert "LABEL" not in reread[0]
        assert reread[1].get("TEL")[0].param("type") == ["CELL"]

    def test_json_workflow(self, sample_path):
        cards = VCardReader.read(sample_path)
        restored = converters.from_json(converters.to_json(cards))
        assert restored == cards
        assert VCardWriter.serialize_all(restored) == VCardWriter.serialize_all(cards)

    def test_normalized_output_is_stable(self, sample_path):
        cards = VCardReader.read(sample_path)
        once = VCardWriter.serialize_all(cards)
        twice = VCardWriter.serialize_all(VCardReader.parse(once))
        assert once == twice


class TestCLI:
    """Test the CLI commands via subprocess."""

    def test_cli_help(self):
        result = _run("--help")
        assert result.returncode == 0
        assert "vCard file tools" in result.stdout

    def test_cli_no_command(self):
        result = _run()
        assert result.returncode == 0
        assert "usage" in result.stdout

    def test_cli_version(self):
        result = _run("--version")
        assert result.returncode == 0
        assert "0.3.0" in result.stdout

    def test_cli_inspect(self, sample_path):
        result = _run("inspect", sample_path)
        assert result.returncode == 0
        assert "CARDS: 2" in result.stdout
        assert "[1] Forrest Gump" in result.stdout
        assert "[2] Bubba Blue" in result.stdout
        assert "TEL;TYPE=WORK,VOICE" in result.stdout

    def test_cli_validate(self, sample_path):
        result = _run("validate", sample_path)
        assert result.returncode == 0
        assert "OK" in result.stdout
        assert "(2 cards)" in result.stdout

    def test_cli_validate_reports_line(self):
        with tempfile.NamedTemporaryFile(mode="wb", suffix=".vcf", delete=False) as f:
            f.write(b"BEGIN:VCARD\r\nFN:x\r\nBAD LINE\r\nEND:VCARD\r\n")
            path = f.name
        try:
            result = _run("validate", path)
            assert result.returncode == 1
            assert "FAIL" in result.stderr
            assert "on line 3" in result.stderr
        finally:
            os.unlink(path)

    def test_cli_validate_lenient(self):
        with tempfile.NamedTemporaryFile(mode="wb", suffix=".vcf", delete=False) as f:
            f.write(b"BEGIN:VCARD\r\nTEL;TYPE=a;TYPE=b:1\r\nEND:VCARD\r\n")
            path = f.name
        try:
            assert _run("validate", path).returncode == 1
            result = _run("validate", "--lenient", path)
            assert result.returncode == 0
            assert "(1 cards)" in result.stdout
        finally:
            os.unlink(path)

    def test_cli_missing_file(self):
        result = _run("validate", "/nonexistent/contacts.vcf")
        assert result.returncode == 1
        assert "File not found" in result.stderr

    def test_cli_format(self, sample_path):
        result = _run("format", "--width", "20", sample_path)
        assert result.returncode == 0
        for line in result.stdout.split("\n"):
            assert len(line.rstrip("\r")) <= 18
        # Bare LF line endings read back the same
        assert VCardReader.parse(result.stdout) == VCardReader.read(sample_path)

    def test_cli_format_unfolded(self, sample_path):
        result = _run("format", "--unfolded", sample_path)
        assert result.returncode == 0
        assert (
            "LABEL;TYPE=HOME:42 Plantation St.\\nBaytown\\, LA 30314\\nUnited States of America\n"
            in result.stdout
        )

    def test_cli_format_width_from_env(self, sample_path):
        env = dict(os.environ, VCARD_FOLD_WIDTH="30")
        with tempfile.TemporaryDirectory() as tmp:
            out = str(Path(tmp) / "out.vcf")
            result = _run("format", sample_path, "-o", out, env=env)
            assert result.returncode == 0
            assert "Wrote" in result.stdout
            data = Path(out).read_bytes()
            for line in data.split(b"\r\n"):
                assert len(line) <= 28

    def test_cli_format_bad_width(self, sample_path):
        result = _run("format", "--width", "2", sample_path)
        assert result.returncode == 1
        assert "Error" in result.stderr

    def test_cli_fold_and_unfold(self):
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "long.txt"
            src.write_bytes(("NOTE:" + "y" * 100 + "\n").encode("utf-8"))
            folded = Path(tmp) / "folded.txt"
            unfolded = Path(tmp) / "unfolded.txt"

            result = _run("fold", str(src), "-w", "40", "-o", str(folded))
            assert result.returncode == 0
            assert b"\r\n " in folded.read_bytes()

            result = _run("unfold", str(folded), "-o", str(unfolded))
            assert result.returncode == 0
            assert unfolded.read_bytes() == src.read_bytes()

    def test_cli_fold_and_unfold_invalid_utf8(self):
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "latin1.txt"
            src.write_bytes(b"NOTE:caf\xe9\xff\xfe\n")
            for command in ("fold", "unfold"):
                result = _run(command, str(src))
                assert result.returncode == 1
                assert "Error" in result.stderr
                assert "not valid UTF-8" in result.stderr
                assert "Traceback" not in result.stderr

    def test_cli_convert_roundtrip(self, sample_path):
        with tempfile.TemporaryDirectory() as tmp:
            json_path = str(Path(tmp) / "cards.json")
            vcf_path = str(Path(tmp) / "cards.vcf")

            result = _run("convert", "to", "json", sample_path, "-o", json_path)
            assert result.returncode == 0
            data = json.loads(Path(json_path).read_text(encoding="utf-8"))
            assert len(data) == 2
            assert data[1] == [
                {"name": "VERSION", "group": "", "params": {}, "values": ["3.0"]},
                {"name": "FN", "group": "", "params": {}, "values": ["Bubba Blue"]},
            ]

            result = _run("convert", "from", "json", json_path, "-o", vcf_path)
            assert result.returncode == 0
            assert "Wrote" in result.stdout
            assert VCardReader.read(vcf_path) == VCardReader.read(sample_path)

    def test_cli_convert_from_bad_json(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            f.write('{"not": "cards"}')
            path = f.name
        try:
            result = _run("convert", "from", "json", path)
            assert result.returncode == 1
            assert "Invalid vCard JSON" in result.stderr
        finally:
            os.unlink(path)

    def test_cli_identify(self, sample_path):
        result = _run("identify", sample_path)
        assert result.returncode == 0
        assert "vCard" in result.stdout

        with tempfile.NamedTemporaryFile(mode="w", suffix=".txt", delete=False) as f:
            f.write("just some text")
            path = f.name
        try:
            result = _run("identify", path)
            assert result.returncode == 1
            assert "not vCard" in result.stdout
        finally:
            os.unlink(path)

    def test_cli_verbose_logs_to_stderr(self, sample_path):
        result = _run("-v", "validate", sample_path)
        assert result.returncode == 0
        assert "DEBUG" in result.stderr
