"""Tests for description record parsing"""

import pytest

from mingpkg.core.desc import PackageRecord, parse_desc
from mingpkg.core.errors import MalformedSpecError

SAMPLE_DESC = """%FILENAME%
mingw-w64-x86_64-curl-8.4.0-1-any.pkg.tar.zst

%NAME%
mingw-w64-x86_64-curl

%VERSION%
8.4.0-1

%DESC%
Command line tool and library for transferring data with URLs

%CSIZE%
1048576

%URL%
https://curl.se/

%LICENSE%
MIT
custom

%BUILDDATE%
1697000000

%DEPENDS%
mingw-w64-x86_64-zlib
mingw-w64-x86_64-openssl>=3.0

winpty

%CONFLICTS%
mingw-w64-x86_64-curl-winssl

%PGPSIG%
iQEzBAABCAAdFiEE
"""


class TestParseDesc:
    """Tests for the section parser."""

    def test_sections(self):
        sections = parse_desc(SAMPLE_DESC)
        assert sections['VERSION'] == ['8.4.0-1']
        assert sections['LICENSE'] == ['MIT', 'custom']

    def test_blank_lines_skipped(self):
        sections = parse_desc(SAMPLE_DESC)
        assert sections['DEPENDS'] == [
            'mingw-w64-x86_64-zlib',
            'mingw-w64-x86_64-openssl>=3.0',
            'winpty',
        ]

    def test_unknown_header_kept(self):
        sections = parse_desc(SAMPLE_DESC)
        assert sections['PGPSIG'] == ['iQEzBAABCAAdFiEE']

    def test_lines_before_header_ignored(self):
        sections = parse_desc("stray line\n%URL%\nhttps://example.org\n")
        assert sections == {'URL': ['https://example.org']}

    def test_empty_section(self):
        sections = parse_desc("%CONFLICTS%\n\n%URL%\nhttps://example.org\n")
        assert sections['CONFLICTS'] == []


class TestPackageRecord:
    """Tests for PackageRecord.from_desc."""

    def test_fields(self):
        record = PackageRecord.from_desc(
            "mingw-w64-x86_64-curl-8.4.0-1", SAMPLE_DESC, "mingw-w64-x86_64"
        )
        assert record.short_name == "curl"
        assert record.version == "8.4.0-1"
        assert record.url == "https://curl.se/"
        assert record.licenses == ("MIT", "custom")
        assert record.build_date == 1697000000
        assert record.csize == 1048576
        assert record.archive_filename == "mingw-w64-x86_64-curl-8.4.0-1-any.pkg.tar.zst"
        assert [d.name for d in record.dependencies] == [
            "mingw-w64-x86_64-zlib", "mingw-w64-x86_64-openssl", "winpty",
        ]
        assert record.dependencies[1].op == ">="
        assert record.conflicts == ("mingw-w64-x86_64-curl-winssl",)

    def test_missing_sections(self):
        record = PackageRecord.from_desc(
            "mingw-w64-x86_64-zlib-1.3-1", "%URL%\nhttps://zlib.net\n", "mingw-w64-x86_64"
        )
        assert record.version == "1.3-1"
        assert record.dependencies == ()
        assert record.build_date == 0

    def test_invalid_build_date(self):
        record = PackageRecord.from_desc(
            "mingw-w64-x86_64-zlib-1.3-1", "%BUILDDATE%\nyesterday\n", "mingw-w64-x86_64"
        )
        assert record.build_date == 0

    def test_malformed_dependency(self):
        with pytest.raises(MalformedSpecError):
            PackageRecord.from_desc(
                "mingw-w64-x86_64-zlib-1.3-1", "%DEPENDS%\nfoo>=1<2\n", "mingw-w64-x86_64"
            )
