# File headers follow Gary Kessler's signature table (garykessler.net/library/file_sigs.html).
# Records flagged "unverified" reproduce long-standing heuristics as-is; do not "fix" them without
# checking an authoritative reference first.

from typing import Literal

from mimedetect.types import SignatureRecord, pattern_from_hex

MAX_HEADER_SIZE = 560
"""Number of leading bytes inspected. Some formats place their signature at offset 512."""


def _sig(hex_pattern: str, extension: str, mime_type: str, header_offset: int = 0) -> SignatureRecord:
    return SignatureRecord(pattern_from_hex(hex_pattern), header_offset, extension, mime_type)


# region ---[ Office, documents, text ]---

WORD = _sig("EC A5 C1 00", "doc", "application/msword", header_offset=512)
EXCEL = _sig("09 08 10 00 00 06 05 00", "xls", "application/excel", header_offset=512)
# Unverified: wildcard position and trailing zeros are approximate.
PPT = _sig("FD FF FF FF ?? 00 00 00", "ppt", "application/mspowerpoint", header_offset=512)

# OOXML and OpenDocument files are ZIP archives. These are resolved by looking inside the archive,
# so they are never part of the scanned catalog.
WORDX = _sig(
    "", "docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document", 512
)
EXCELX = _sig("", "xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", 512)
ODT = _sig("", "odt", "application/vnd.oasis.opendocument.text", 512)
ODS = _sig("", "ods", "application/vnd.oasis.opendocument.spreadsheet", 512)

RTF = _sig("7B 5C 72 74 66 31", "rtf", "application/rtf")
PDF = _sig("25 50 44 46", "pdf", "application/pdf")
MSDOC = _sig("D0 CF 11 E0 A1 B1 1A E1", "", "application/octet-stream")
XML = _sig("72 73 69 6F 6E 3D 22 31 2E 30 22 3F 3E", "xml,xul", "text/xml")

TXT = _sig("", "txt", "text/plain")
TXT_UTF8 = _sig("EF BB BF", "txt", "text/plain")
TXT_UTF16_BE = _sig("FE FF", "txt", "text/plain")
TXT_UTF16_LE = _sig("FF FE", "txt", "text/plain")
TXT_UTF32_BE = _sig("00 00 FE FF", "txt", "text/plain")
TXT_UTF32_LE = _sig("FF FE 00 00", "txt", "text/plain")

# endregion

# region ---[ Graphics ]---

JPEG = _sig("FF D8 FF", "jpg", "image/jpeg")
PNG = _sig("89 50 4E 47 0D 0A 1A 0A", "png", "image/png")
GIF = _sig("47 49 46 38 ?? 61", "gif", "image/gif")
BMP = _sig("42 4D", "bmp", "image/bmp")
ICO = _sig("00 00 01 00", "ico", "image/x-icon")
# Unverified: the three TIFF records below need checking against real files.
TIFF = _sig("49 44 33", "tiff", "image/tiff")
TIFF_LITTLE_ENDIAN = _sig("49 49 2A 00 10 00 00 00 43 52", "tiff", "image/tiff")
TIFF_BIG_ENDIAN = _sig("4D 4D 4D 44 00 00", "tiff", "image/tiff")

# endregion

# region ---[ Archives and executables ]---

GZ_TGZ = _sig("1F 8B 08", "gz, tgz", "application/x-gz")
# "BM": always shadowed by BMP, which comes first in the catalog.
ZIP_7Z = _sig("42 4D", "7z", "application/x-compressed")
ZIP_7Z_2 = _sig("37 7A BC AF 27 1C", "7z", "application/x-compressed")
ZIP = _sig("50 4B 03 04", "zip", "application/x-compressed")
RAR = _sig("52 61 72 21", "rar", "application/x-compressed")
DLL_EXE = _sig("4D 5A", "dll, exe", "application/octet-stream")
TAR_ZV = _sig("1F 9D", "tar.z", "application/x-tar")  # LZW-compressed tape archive
TAR_ZH = _sig("1F A0", "tar.z", "application/x-tar")  # LZH-compressed tape archive
BZ2 = _sig("42 5A 68", "bz2,tar,bz2,tbz2,tb2", "application/x-bzip2")
LIB_COFF = _sig("21 3C 61 72 63 68 3E 0A", "lib", "application/octet-stream")

# endregion

# region ---[ Media ]---

OGG = _sig("67 67 53 00 02 00 00 00 00 00 00 00 00", "oga,ogg,ogv,ogx", "application/ogg")
MIDI = _sig("4D 54 68 64", "midi,mid", "audio/midi")
FLV = _sig("46 4C 56 01", "flv", "application/unknown")
# RIFF, 4 size bytes (little endian), WAVEfmt
WAVE = _sig("52 49 46 46 ?? ?? ?? ?? 57 41 56 45 66 6D 74 20", "wav", "audio/wav")
PST = _sig("21 42 44 4E", "pst", "application/octet-stream")
DWG = _sig("41 43 31 30", "dwg", "application/acad")
PSD = _sig("38 42 50 53", "psd", "application/octet-stream")

# endregion

# region ---[ Crypto, mail, logs ]---

AES = _sig("41 45 53", "aes", "application/octet-stream")  # 4th byte is the version
SKR = _sig("95 00", "skr", "application/octet-stream")  # PGP secret keyring
SKR_2 = _sig("95 01", "skr", "application/octet-stream")
PKR = _sig("99 01", "pkr", "application/octet-stream")  # PGP public keyring
# "From" (Netscape, Eudora, generic mbox-ish headers)
EML_FROM = _sig("46 72 6F 6D", "eml", "message/rfc822")
# "ElfFile\0": Windows Vista event log (EVTX), not the Unix ELF format.
ELF = _sig("45 6C 66 46 69 6C 65 00", "elf", "text/plain")

# endregion

# Scan order is match priority. DLL_EXE appears twice; BZ2 is defined but never scanned.
DEFAULT_SIGNATURES: tuple[SignatureRecord, ...] = (
    PDF,
    WORD,
    EXCEL,
    JPEG,
    ZIP,
    RAR,
    RTF,
    PNG,
    PPT,
    GIF,
    DLL_EXE,
    MSDOC,
    BMP,
    DLL_EXE,
    ZIP_7Z,
    ZIP_7Z_2,
    GZ_TGZ,
    TAR_ZH,
    TAR_ZV,
    OGG,
    ICO,
    XML,
    MIDI,
    FLV,
    WAVE,
    DWG,
    LIB_COFF,
    PST,
    PSD,
    AES,
    SKR,
    SKR_2,
    PKR,
    EML_FROM,
    ELF,
    TXT_UTF8,
    TXT_UTF16_BE,
    TXT_UTF16_LE,
    TXT_UTF32_BE,
    TXT_UTF32_LE,
    TIFF,
    TIFF_BIG_ENDIAN,
    TIFF_LITTLE_ENDIAN,
)

ZIP_SUBTYPE_RECORDS: tuple[SignatureRecord, ...] = (WORDX, EXCELX, ODT, ODS)

# region ---[ CLI defaults ]---

DEFAULT_TAG: Literal["text", "json"] = "text"
DEFAULT_TAG_CHOICES = ["text", "json"]
DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_INCLUDE_HIDDEN = False
DEFAULT_NO_IGNORE = False
DEFAULT_MAX_FILES = None
DEFAULT_VERBOSITY = 0
CATALOG_ENV_VAR = "MIMEDETECT_CATALOG"

# Gitignore-style patterns, matched relative to each walked root.
DEFAULT_EXCLUSIONS: list[str] = [
    ".git/",
    "__pycache__/",
    "node_modules/",
]

# endregion
