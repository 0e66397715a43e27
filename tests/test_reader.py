import pytest

from listmover.errors import ListReadError
from listmover.reader import ListReader, read_exclusions


def entries(reader):
    return [(e.line_number, e.source_path) for e in reader.read_entries()]


def test_plain_list(write_list):
    path = write_list(["/a/1.txt", "/a/2.txt"])
    assert entries(ListReader(path)) == [(1, "/a/1.txt"), (2, "/a/2.txt")]


def test_blank_lines_are_dropped_but_counted(write_list):
    path = write_list(["/a/1.txt", "", "   ", "/a/2.txt"])
    assert entries(ListReader(path)) == [(1, "/a/1.txt"), (4, "/a/2.txt")]


@pytest.mark.parametrize("header", ["Path", "File", "Source", "path", '"Path"', "Path,Size"])
def test_header_is_skipped_and_line_numbers_stay_true(write_list, header):
    path = write_list([header, "/a/1.txt"])
    assert entries(ListReader(path)) == [(2, "/a/1.txt")]


def test_header_only_checked_on_first_line(write_list):
    path = write_list(["/a/1.txt", "Path"])
    assert entries(ListReader(path)) == [(1, "/a/1.txt"), (2, "Path")]


def test_quotes_are_stripped(write_list):
    path = write_list(['"/a/with space.txt"'])
    assert entries(ListReader(path)) == [(1, "/a/with space.txt")]


def test_start_offset_skips_after_header(write_list):
    path = write_list(["Path", "/a/1.txt", "/a/2.txt", "/a/3.txt"])
    assert entries(ListReader(path, start_offset=2)) == [(3, "/a/2.txt"), (4, "/a/3.txt")]


def test_start_offset_past_end(write_list):
    path = write_list(["/a/1.txt"])
    assert entries(ListReader(path, start_offset=5)) == []


def test_utf8_bom_does_not_hide_header(tmp_path):
    path = tmp_path / "bom.txt"
    path.write_text("\ufeffPath\n/a/1.txt\n", encoding="utf-8")
    assert entries(ListReader(path)) == [(2, "/a/1.txt")]


def test_csv_binds_to_named_column(write_list):
    path = write_list(["Name,Path,Size", "x,/a/x.txt,1", "", "y,/a/y.txt,2"], name="list.csv")
    reader = ListReader(path, list_format="csv")
    assert entries(reader) == [(2, "/a/x.txt"), (4, "/a/y.txt")]


def test_csv_custom_column(write_list):
    path = write_list(["FullName,Other", "/a/x.txt,1"], name="list.csv")
    assert entries(ListReader(path, list_format="csv", column="FullName")) == [(2, "/a/x.txt")]


def test_csv_without_header_uses_first_column(write_list):
    path = write_list(["/a/x.txt,1", "/a/y.txt,2"], name="list.csv")
    assert entries(ListReader(path, list_format="csv")) == [(1, "/a/x.txt"), (2, "/a/y.txt")]


def test_csv_quoted_path_with_comma(write_list):
    path = write_list(["Path", '"/a/b, c.txt"'], name="list.csv")
    assert entries(ListReader(path, list_format="csv")) == [(2, "/a/b, c.txt")]


def test_csv_header_missing_configured_column(write_list):
    path = write_list(["Source,Size", "/a/x.txt,1"], name="list.csv")
    with pytest.raises(ListReadError):
        list(ListReader(path, list_format="csv", column="Path").read_entries())


def test_missing_file_raises_list_read_error(tmp_path):
    with pytest.raises(ListReadError):
        list(ListReader(tmp_path / "nope.txt").read_entries())


def test_undecodable_file_raises_list_read_error(tmp_path):
    path = tmp_path / "bad.txt"
    path.write_bytes(b"/a/\xff\xfe\xfa.txt\n")
    with pytest.raises(ListReadError):
        list(ListReader(path, encoding="utf-8").read_entries())


def test_unknown_format_rejected(write_list):
    with pytest.raises(ValueError):
        ListReader(write_list(["/a"]), list_format="xlsx")


def test_read_exclusions(write_list):
    path = write_list(["# keep these", "/src/A/B", "", '"/src/C/z.txt"'], name="exclude.txt")
    assert read_exclusions(path) == ("/src/A/B", "/src/C/z.txt")


def test_read_exclusions_missing(tmp_path):
    with pytest.raises(ListReadError):
        read_exclusions(tmp_path / "missing.txt")
