"""Tests for CSV parsing and validation."""
import pytest

from encore.schemas.imports import ParsedSong
from encore.services.csv_parser import parse_csv, parse_duration, validate_songs


class TestParseDuration:
    """Duration cell formats."""

    @pytest.mark.parametrize("value,expected", [
        ("334", 334),
        ("5:34", 334),
        ("05:34", 334),
        ("5m34s", 334),
        ("5m 34s", 334),
        (" 3:05 ", 185),
        ("0", 0),
    ])
    def test_supported_formats(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["invalid", "", None, "1:2:3", "5:345", "-12", "3.5", "5m"])
    def test_unparseable_is_none(self, value):
        assert parse_duration(value) is None


class TestParseCSV:
    """Document parsing."""

    def test_basic_rows(self):
        result = parse_csv(
            "title,artist,album,duration,genre\n"
            "Bohemian Rhapsody,Queen,A Night at the Opera,5:54,rock\n"
            "Africa,Toto,,295,\n"
        )

        assert result.success
        assert result.total_rows == 2
        assert result.valid_rows == 2
        assert result.invalid_rows == 0

        first, second = result.songs
        assert first.title == "Bohemian Rhapsody"
        assert first.artist == "Queen"
        assert first.album == "A Night at the Opera"
        assert first.duration == 354
        assert first.genre == "rock"
        assert first.row_number == 2
        assert second.album is None
        assert second.genre is None
        assert second.row_number == 3

    def test_commas_inside_quotes_are_preserved(self):
        result = parse_csv('title,artist\n"Song, Part 1","Artist, The"\n')

        song = result.songs[0]
        assert song.title == "Song, Part 1"
        assert song.artist == "Artist, The"

    def test_doubled_quotes_are_literal(self):
        result = parse_csv('title,artist\n"He Said ""Hi""",Band\n')

        assert result.songs[0].title == 'He Said "Hi"'

    def test_whitespace_is_trimmed(self):
        result = parse_csv('title , artist\n  Africa  ,  " Toto "  \n')

        song = result.songs[0]
        assert song.title == "Africa"
        assert song.artist == "Toto"

    def test_header_without_title_and_artist_is_rejected(self):
        result = parse_csv("name,performer\nSong,Someone\n")

        assert result.success is False
        assert "title" in result.errors[0].message
        assert result.songs == []

    def test_header_names_are_case_sensitive(self):
        result = parse_csv("Title,Artist\nSong,Someone\n")

        assert result.success is False

    def test_missing_artist_column_names_artist(self):
        result = parse_csv("title,album\nSong,Album\n")

        assert result.success is False
        assert "artist" in result.errors[0].message

    @pytest.mark.parametrize("text", ["", "   ", "\n\n"])
    def test_empty_document_is_rejected(self, text):
        result = parse_csv(text)

        assert result.success is False
        assert "empty" in result.errors[0].message.lower()

    def test_columns_in_any_order(self):
        result = parse_csv("genre,artist,title\npop,ABBA,Dancing Queen\n")

        song = result.songs[0]
        assert (song.title, song.artist, song.genre) == ("Dancing Queen", "ABBA", "pop")

    def test_byte_order_mark_is_ignored(self):
        result = parse_csv("\ufefftitle,artist\nSong,Band\n")

        assert result.success
        assert result.songs[0].title == "Song"

    def test_blank_lines_keep_source_line_numbers(self):
        result = parse_csv("title,artist\n\nFirst,A\n\n\nSecond,B\n")

        assert [s.row_number for s in result.songs] == [3, 6]

    def test_multiline_quoted_field_keeps_following_line_numbers(self):
        result = parse_csv('title,artist\n"Two\nLines",A\nNext,B\n')

        assert result.songs[0].title == "Two\nLines"
        assert [s.row_number for s in result.songs] == [2, 4]

    def test_crlf_line_endings(self):
        result = parse_csv("title,artist\r\nSong,Band\r\nOther,Band\r\n")

        assert [s.title for s in result.songs] == ["Song", "Other"]
        assert [s.row_number for s in result.songs] == [2, 3]

    def test_unparseable_duration_does_not_fail_row(self):
        result = parse_csv("title,artist,duration\nSong,Band,invalid\n")

        song = result.songs[0]
        assert song.duration is None
        assert song.errors == []
        assert result.valid_rows == 1

    def test_out_of_range_duration_fails_row(self):
        result = parse_csv("title,artist,duration\nSong,Band,7200\n")

        song = result.songs[0]
        assert song.duration == 7200
        assert song.errors == ["Invalid duration (must be between 0 and 3600 seconds)"]
        assert result.invalid_rows == 1
        assert result.errors[0].row == 2

    def test_rows_missing_title_or_artist_are_kept(self):
        result = parse_csv("title,artist\nGood,Band\nNo Artist,\n,No Title\nShort\n")

        assert result.success
        assert result.total_rows == 4
        assert result.valid_rows == 1
        assert result.invalid_rows == 3

        assert result.songs[1].errors == ["Artist is required"]
        assert result.songs[2].errors == ["Title is required"]
        assert result.songs[3].title == "Short"
        assert result.songs[3].errors == ["Artist is required"]
        assert [(e.row, e.message) for e in result.errors] == [
            (3, "Artist is required"),
            (4, "Title is required"),
            (5, "Artist is required"),
        ]


class TestValidateSongs:
    """Valid/invalid split."""

    def test_split(self):
        songs = [
            ParsedSong(title="Good", artist="Band", row_number=2),
            ParsedSong(title="", artist="Band", row_number=3),
            ParsedSong(title="Long", artist="Band", duration=9999, row_number=4,
                       errors=["Invalid duration (must be between 0 and 3600 seconds)"]),
            ParsedSong(title="  ", artist=" ", row_number=5),
        ]

        valid, invalid = validate_songs(songs)

        assert [s.row_number for s in valid] == [2]
        assert [s.row_number for s in invalid] == [3, 4, 5]
        assert invalid[0].errors == ["Title is required"]
        assert invalid[1].errors == ["Invalid duration (must be between 0 and 3600 seconds)"]
        assert invalid[2].errors == ["Title is required", "Artist is required"]

    def test_reasons_are_not_duplicated(self):
        song = ParsedSong(title="", artist="Band", row_number=2, errors=["Title is required"])

        _, invalid = validate_songs([song])

        assert invalid[0].errors == ["Title is required"]

    def test_input_rows_are_not_modified(self):
        song = ParsedSong(title="", artist="", row_number=2)

        validate_songs([song])

        assert song.errors == []
