#!/usr/bin/env python3
"""
QR Paper Backup - Print any file as pages of QR codes and scan it back

This tool splits a file into chunks, encodes each chunk as a QR code, lays the
codes out on page images ready for printing, and reconstructs the original
file from scanned page images supplied in any order.

REQUIREMENTS:
  Python 3.8+

  Install with:
    pip install .

  System dependencies:
    - poppler (only for decoding PDF scans): apt-get install poppler-utils

USAGE:
  Encode a file into page images:
    python qr_paper_backup.py encode myfile.bin -o pages/ -r 3 -c 3 -e M -v 10

  Decode a directory of scanned pages:
    python qr_paper_backup.py decode scans/ -o recovered.bin

  Check which codes were found without writing output:
    python qr_paper_backup.py info scans/

WIRE FORMAT:
  Every QR code holds [Index:2][Payload], the index a big-endian uint16.
  Data chunks are numbered 0..N-1. The final code, index N, holds the
  big-endian CRC-32 of the complete original file.
"""

import io
import os
import sys
import zlib
from collections import Counter
from typing import Callable, Dict, Iterable, Iterator, List, NamedTuple, Tuple

import click
import cv2
import numpy as np
import qrcode
from qrcode import util as qr_util
from qrcode.constants import ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q, ERROR_CORRECT_H
from PIL import Image, ImageDraw, ImageFont
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as pdf_canvas
import zxingcpp

VERSION = "1.0.0"

# QR Code error correction mapping
ERROR_CORRECTION_LEVELS = {
    'L': ERROR_CORRECT_L,  # ~7% error correction
    'M': ERROR_CORRECT_M,  # ~15% error correction
    'Q': ERROR_CORRECT_Q,  # ~25% error correction
    'H': ERROR_CORRECT_H,  # ~30% error correction
}

MIN_QR_VERSION = 1
MAX_QR_VERSION = 40

# Chunk framing
INDEX_SIZE = 2
CHECKSUM_SIZE = 4
MAX_CHUNK_INDEX = 2**16 - 1

# The checksum code always fits the smallest, most robust symbol
CHECKSUM_QR_VERSION = 1
CHECKSUM_ERROR_CORRECTION = 'H'

# Page raster geometry (pixels, except BORDER which is in modules)
BOX_SIZE = 4
BORDER = 4
CELL_SPACING = 20
LABEL_HEIGHT = 20
PAGE_MARGIN = 40

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg')
PDF_EXTENSION = '.pdf'
PDF_DPI = 300


# ============================================================================
# ERRORS
# ============================================================================

class BackupError(ValueError):
    """Base class for every failure the backup pipeline reports."""


class InvalidArgumentError(BackupError):
    pass


class InvalidLayoutError(InvalidArgumentError):
    pass


class UnknownCapacityError(BackupError):
    pass


class InvalidCapacityError(BackupError):
    pass


class TooManyChunksError(BackupError):
    pass


class RenderError(BackupError):
    pass


class ImageReadError(BackupError):
    pass


class MalformedPayloadError(BackupError):
    pass


class DuplicateChunkError(BackupError):
    pass


class MissingChunkError(BackupError):
    pass


class MissingChecksumError(BackupError):
    pass


class ChecksumMismatchError(BackupError):
    pass


def _silent(message: str = '', err: bool = False) -> None:
    pass


# ============================================================================
# CAPACITY TABLE
# ============================================================================

# Byte mode capacity for every QR version, columns L, M, Q, H
_BYTE_CAPACITY_ROWS = (
    (17, 14, 11, 7),
    (32, 26, 20, 14),
    (53, 42, 32, 24),
    (78, 62, 46, 34),
    (106, 84, 60, 44),
    (134, 106, 74, 58),
    (154, 122, 86, 64),
    (192, 152, 108, 84),
    (230, 180, 130, 98),
    (271, 213, 151, 119),
    (321, 251, 177, 137),
    (367, 287, 203, 155),
    (425, 331, 241, 177),
    (458, 362, 258, 194),
    (520, 412, 292, 220),
    (586, 450, 322, 250),
    (644, 504, 364, 280),
    (718, 560, 394, 310),
    (792, 624, 442, 338),
    (858, 666, 482, 382),
    (929, 711, 509, 403),
    (1003, 779, 565, 439),
    (1091, 857, 611, 461),
    (1171, 911, 661, 511),
    (1273, 997, 715, 535),
    (1367, 1059, 751, 593),
    (1465, 1125, 805, 625),
    (1528, 1190, 868, 658),
    (1628, 1264, 908, 698),
    (1732, 1370, 982, 742),
    (1840, 1452, 1030, 790),
    (1952, 1538, 1112, 842),
    (2068, 1628, 1168, 898),
    (2188, 1722, 1228, 958),
    (2303, 1809, 1283, 983),
    (2431, 1911, 1351, 1051),
    (2563, 1989, 1423, 1093),
    (2699, 2099, 1499, 1139),
    (2809, 2213, 1579, 1219),
    (2953, 2331, 1663, 1273),
)

QR_BYTE_CAPACITY = {
    (version, level): capacity
    for version, row in enumerate(_BYTE_CAPACITY_ROWS, start=MIN_QR_VERSION)
    for level, capacity in zip('LMQH', row)
}


def get_qr_capacity(qr_version: int, error_correction: str) -> int:
    """Look up how many bytes a QR code can hold in byte mode.

    Args:
        qr_version: QR code version (1-40)
        error_correction: Error correction level ('L', 'M', 'Q', 'H')

    Returns:
        Capacity in bytes

    Raises:
        UnknownCapacityError: If the table has no entry for this exact pair
    """
    try:
        return QR_BYTE_CAPACITY[(qr_version, error_correction)]
    except KeyError:
        raise UnknownCapacityError(
            f"No QR capacity known for version {qr_version!r}, "
            f"error correction {error_correction!r}"
        )


def validate_qr_settings(qr_version: int, error_correction: str) -> None:
    """Reject an error correction level or version the encoder cannot use."""
    if error_correction not in ERROR_CORRECTION_LEVELS:
        raise InvalidArgumentError(
            f"Invalid error correction level {error_correction!r}, expected L, M, Q or H"
        )
    if not MIN_QR_VERSION <= qr_version <= MAX_QR_VERSION:
        raise InvalidArgumentError(
            f"Invalid version {qr_version}, expected {MIN_QR_VERSION}-{MAX_QR_VERSION}"
        )


# ============================================================================
# ENCODING FUNCTIONS
# ============================================================================

class Chunk(NamedTuple):
    """One framed unit of the backup, mapped 1:1 to a QR code."""

    index: int
    payload: bytes

    def to_bytes(self) -> bytes:
        return self.index.to_bytes(INDEX_SIZE, byteorder='big') + self.payload


def calculate_checksum(data: bytes) -> bytes:
    """CRC-32 (IEEE 802.3) of data as 4 big-endian bytes."""
    return zlib.crc32(data).to_bytes(CHECKSUM_SIZE, byteorder='big')


def calculate_chunk_size(qr_version: int, error_correction: str,
                         capacity_lookup: Callable[[int, str], int] = get_qr_capacity) -> int:
    """Calculate how many file bytes go into each data QR code.

    Two bytes of every code are reserved for the chunk index.

    Args:
        qr_version: QR code version
        error_correction: Error correction level
        capacity_lookup: Maps (version, level) to byte capacity

    Returns:
        Bytes of file data per QR code

    Raises:
        InvalidCapacityError: If the capacity leaves no room for data
    """
    capacity = capacity_lookup(qr_version, error_correction)
    if capacity <= INDEX_SIZE:
        raise InvalidCapacityError(
            f"QR version {qr_version} with error correction {error_correction} holds "
            f"{capacity} bytes, not enough for the {INDEX_SIZE}-byte chunk index"
        )
    return capacity - INDEX_SIZE


def create_chunks(data: bytes, qr_version: int, error_correction: str,
                  capacity_lookup: Callable[[int, str], int] = get_qr_capacity) -> List[Chunk]:
    """Split data into indexed chunks followed by one checksum chunk.

    Data chunks are numbered from 0 and hold at most calculate_chunk_size()
    bytes each; only the last may be shorter. Empty data still produces one
    (empty) data chunk. The checksum chunk takes the next index after the
    last data chunk and holds the CRC-32 of the whole of data.

    Args:
        data: Complete file contents
        qr_version: QR code version used for the data codes
        error_correction: Error correction level used for the data codes
        capacity_lookup: Maps (version, level) to byte capacity

    Returns:
        List of N data chunks plus the checksum chunk, in emission order

    Raises:
        InvalidCapacityError: If the symbol is too small for any data
        TooManyChunksError: If the chunk indices would overflow 16 bits

    Example:
        >>> chunks = create_chunks(b"HELLO", 1, 'H')
        >>> [c.to_bytes() for c in chunks][0]
        b'\\x00\\x00HELLO'
    """
    chunk_size = calculate_chunk_size(qr_version, error_correction, capacity_lookup)

    if data:
        total_chunks = (len(data) + chunk_size - 1) // chunk_size
    else:
        total_chunks = 1

    # The checksum chunk needs an index too
    if total_chunks > MAX_CHUNK_INDEX:
        raise TooManyChunksError(
            f"File requires {total_chunks:,} QR codes, exceeds maximum of "
            f"{MAX_CHUNK_INDEX:,} (use a larger version or lower error correction)"
        )

    chunks = []
    for index in range(total_chunks):
        offset = index * chunk_size
        chunks.append(Chunk(index, bytes(data[offset:offset + chunk_size])))

    chunks.append(Chunk(total_chunks, calculate_checksum(data)))
    return chunks


def create_qr_code(payload: bytes, qr_version: int, error_correction: str,
                   box_size: int = BOX_SIZE, border: int = BORDER) -> Image.Image:
    """Generate a QR code image holding payload as raw bytes.

    The version is fixed; data that does not fit raises
    qrcode.exceptions.DataOverflowError instead of growing the symbol.

    Args:
        payload: Bytes to encode (byte mode, no transcoding)
        qr_version: QR code version (1-40)
        error_correction: Error correction level
        box_size: Size of each QR module in pixels
        border: Quiet zone width in modules

    Returns:
        Grayscale PIL Image of the QR code
    """
    qr = qrcode.QRCode(
        version=qr_version,
        error_correction=ERROR_CORRECTION_LEVELS[error_correction],
        box_size=box_size,
        border=border,
    )
    qr.add_data(qr_util.QRData(payload, mode=qr_util.MODE_8BIT_BYTE))
    qr.make(fit=False)

    img = qr.make_image(fill_color="black", back_color="white")
    return img.get_image().convert('L')


def create_symbol(chunk: Chunk, total_data_chunks: int, qr_version: int,
                  error_correction: str) -> Tuple[str, Image.Image]:
    """Render one chunk as a labeled QR code.

    The checksum chunk (index == total_data_chunks) always uses a version 1,
    level H code.
    """
    if chunk.index == total_data_chunks:
        label = "Checksum"
        image = create_qr_code(chunk.to_bytes(), CHECKSUM_QR_VERSION, CHECKSUM_ERROR_CORRECTION)
    else:
        label = f"Code {chunk.index + 1} of {total_data_chunks}"
        image = create_qr_code(chunk.to_bytes(), qr_version, error_correction)
    return label, image


# ============================================================================
# PAGE COMPOSITION
# ============================================================================

def validate_layout(rows: int, cols: int) -> None:
    if rows < 1 or cols < 1:
        raise InvalidLayoutError(f"Invalid grid {rows}x{cols}, rows and columns must be at least 1")


def layout_pages(count: int, rows: int, cols: int) -> List[List[Tuple[int, int, int]]]:
    """Distribute count items over pages of rows x cols grid cells.

    Items keep their order; the last page may be partial.

    Returns:
        One list per page of (item_index, row, col)

    Example:
        >>> layout_pages(5, 2, 2)
        [[(0, 0, 0), (1, 0, 1), (2, 1, 0), (3, 1, 1)], [(4, 0, 0)]]
    """
    validate_layout(rows, cols)
    per_page = rows * cols

    pages = []
    for start in range(0, count, per_page):
        end = min(start + per_page, count)
        pages.append([
            (item_idx, local_idx // cols, local_idx % cols)
            for local_idx, item_idx in enumerate(range(start, end))
        ])
    return pages


def compose_pages(symbols: List[Tuple[str, Image.Image]], rows: int, cols: int) -> List[Image.Image]:
    """Lay labeled QR codes out on page images.

    Every code is centered in a square cell sized for the largest code, with
    its label underneath. All pages share the full rows x cols page size.

    Args:
        symbols: (label, image) pairs in emission order
        rows: QR codes per page column
        cols: QR codes per page row

    Returns:
        List of grayscale page images
    """
    page_layouts = layout_pages(len(symbols), rows, cols)
    if not symbols:
        return []

    cell = max(max(image.size) for _, image in symbols)
    cell_height = cell + LABEL_HEIGHT
    page_width = 2 * PAGE_MARGIN + cols * cell + (cols - 1) * CELL_SPACING
    page_height = 2 * PAGE_MARGIN + rows * cell_height + (rows - 1) * CELL_SPACING
    font = ImageFont.load_default()

    pages = []
    for page_layout in page_layouts:
        page = Image.new('L', (page_width, page_height), 255)
        draw = ImageDraw.Draw(page)

        for item_idx, row, col in page_layout:
            label, image = symbols[item_idx]
            x = PAGE_MARGIN + col * (cell + CELL_SPACING)
            y = PAGE_MARGIN + row * (cell_height + CELL_SPACING)

            width, height = image.size
            page.paste(image.convert('L'), (x + (cell - width) // 2, y + (cell - height) // 2))

            text_width = draw.textlength(label, font=font)
            draw.text((x + (cell - text_width) / 2, y + cell + 4), label, fill=0, font=font)

        pages.append(page)

    return pages


def write_pages(pages: List[Image.Image], output_dir: str) -> List[str]:
    """Write pages as page0.png, page1.png, ... into output_dir.

    Pages written before a failure are left on disk.

    Raises:
        RenderError: If any page cannot be written
    """
    paths = []
    for page_idx, page in enumerate(pages):
        path = os.path.join(output_dir, f"page{page_idx}.png")
        try:
            page.save(path, format='PNG')
        except (OSError, ValueError) as e:
            raise RenderError(f"Failed to write page {page_idx} to {path}: {e}") from e
        paths.append(path)
    return paths


def write_pdf(pages: List[Image.Image], output_path: str,
              page_size: Tuple[float, float] = LETTER, margin_mm: float = 10.0) -> None:
    """Bundle page images into a printable PDF, one image per PDF page.

    Each image is scaled to fit inside the margins, keeping its aspect ratio,
    and centered.
    """
    page_width, page_height = page_size
    margin = margin_mm * mm
    available_width = page_width - 2 * margin
    available_height = page_height - 2 * margin

    c = pdf_canvas.Canvas(output_path, pagesize=page_size)
    for page in pages:
        width, height = page.size
        scale = min(available_width / width, available_height / height)
        draw_width = width * scale
        draw_height = height * scale

        img_buffer = io.BytesIO()
        page.save(img_buffer, format='PNG')
        img_buffer.seek(0)

        c.drawImage(ImageReader(img_buffer),
                    (page_width - draw_width) / 2, (page_height - draw_height) / 2,
                    width=draw_width, height=draw_height)
        c.showPage()
    c.save()


# ============================================================================
# SCANNING FUNCTIONS
# ============================================================================

def list_scan_files(input_path: str) -> List[str]:
    """Find the scan files to read from a file or a directory.

    A directory contributes every PNG, JPEG or PDF file directly inside it;
    any other path is returned as-is. The order carries no meaning.

    Raises:
        ImageReadError: If input_path does not exist
    """
    if not os.path.exists(input_path):
        raise ImageReadError(f"Input path '{input_path}' does not exist")

    if not os.path.isdir(input_path):
        return [input_path]

    files = []
    for name in sorted(os.listdir(input_path)):
        path = os.path.join(input_path, name)
        ext = os.path.splitext(name)[1].lower()
        if os.path.isfile(path) and (ext in IMAGE_EXTENSIONS or ext == PDF_EXTENSION):
            files.append(path)
    return files


def pdf_to_images(pdf_path: str, dpi: int = PDF_DPI) -> List[np.ndarray]:
    """Convert PDF pages to OpenCV (BGR) images."""
    from pdf2image import convert_from_path

    cv_images = []
    for pil_img in convert_from_path(pdf_path, dpi=dpi):
        img_array = np.array(pil_img.convert('RGB'))
        cv_images.append(cv2.cvtColor(img_array, cv2.COLOR_RGB2BGR))
    return cv_images


def load_image(path: str) -> np.ndarray:
    """Read an image file with OpenCV.

    Raises:
        ImageReadError: If the file cannot be read as an image
    """
    image = cv2.imread(path, cv2.IMREAD_COLOR)
    if image is None:
        raise ImageReadError(f"Cannot read image '{path}'")
    return image


def iter_scan_images(paths: Iterable[str]) -> Iterator[Tuple[str, np.ndarray]]:
    """Yield (name, image) for every image in paths, one per PDF page."""
    for path in paths:
        name = os.path.basename(path)
        if os.path.splitext(path)[1].lower() == PDF_EXTENSION:
            try:
                images = pdf_to_images(path)
            except Exception as e:
                raise ImageReadError(f"Cannot read PDF '{path}': {e}") from e
            for page_idx, image in enumerate(images, 1):
                yield f"{name} page {page_idx}", image
        else:
            yield name, load_image(path)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert an OpenCV image to a single-channel 8-bit array."""
    if image.ndim == 2:
        return image
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def decode_qr_codes_from_image(image: np.ndarray) -> List[bytes]:
    """Find and decode all QR codes in an image.

    Payloads are the symbol's byte mode content exactly as encoded, with
    no character set guessing.

    Args:
        image: OpenCV image (numpy array, color or grayscale)

    Returns:
        List of raw payloads, in no particular order
    """
    gray = np.ascontiguousarray(to_grayscale(image))
    results = zxingcpp.read_barcodes(gray, formats=zxingcpp.BarcodeFormat.QRCode)
    return [bytes(result.bytes) for result in results]


def collect_payloads(scans: Iterable[Tuple[str, np.ndarray]],
                     scanner: Callable[[np.ndarray], List[bytes]] = decode_qr_codes_from_image,
                     echo: Callable[..., None] = _silent) -> List[bytes]:
    """Scan every image and flatten the payloads into one list.

    An image that fails to scan, or has no QR codes, is reported through
    echo and skipped.

    Args:
        scans: (name, image) pairs
        scanner: Returns the payloads found in one image
        echo: click.echo compatible reporter

    Returns:
        Every payload found, without any image provenance
    """
    payloads = []
    for name, image in scans:
        try:
            found = scanner(image)
        except (TypeError, ValueError, cv2.error) as e:
            echo(f"\nWarning: {name} - scan failed: {e}", err=True)
            continue

        if not found:
            echo(f"\nWarning: {name} - no QR codes found", err=True)
            continue

        payloads.extend(found)

    if not payloads:
        echo("\nWarning: no QR codes found in any image", err=True)

    return payloads


# ============================================================================
# REASSEMBLY FUNCTIONS
# ============================================================================

def parse_payload(payload: bytes) -> Chunk:
    """Split a scanned payload into its index and data.

    Raises:
        MalformedPayloadError: If the payload is too short to hold an index
    """
    if len(payload) < INDEX_SIZE:
        raise MalformedPayloadError(
            f"QR code payload of {len(payload)} byte(s) is too short for a chunk index "
            f"(not from this backup?)"
        )
    return Chunk(int.from_bytes(payload[:INDEX_SIZE], byteorder='big'), bytes(payload[INDEX_SIZE:]))


def order_chunks(payloads: Iterable[bytes]) -> List[Chunk]:
    """Parse payloads and sort them into a contiguous run of indices.

    The same code scanned twice collapses to one chunk; two different
    payloads claiming the same index are an error, as is any gap.

    Raises:
        MalformedPayloadError: If any payload is too short
        DuplicateChunkError: If an index carries conflicting payloads
        MissingChunkError: If indices 0..max are not all present
    """
    chunks = sorted((parse_payload(p) for p in payloads), key=lambda c: c.index)

    ordered = []
    conflicts = []
    for chunk in chunks:
        if ordered and ordered[-1].index == chunk.index:
            if ordered[-1].payload != chunk.payload and conflicts[-1:] != [chunk.index]:
                conflicts.append(chunk.index)
            continue
        ordered.append(chunk)

    if conflicts:
        raise DuplicateChunkError(
            f"Conflicting QR codes share chunk indices {conflicts}. "
            f"All pages must be from the same backup file."
        )

    if ordered:
        found = {c.index for c in ordered}
        missing = [i for i in range(ordered[-1].index + 1) if i not in found]
        if missing:
            raise MissingChunkError(
                f"Missing chunks {missing}. Found {len(found)} of "
                f"{ordered[-1].index + 1} (checksum code included)."
            )

    return ordered


def verify_checksum(data: bytes, expected: bytes) -> None:
    """Compare the CRC-32 of data with the checksum code's payload.

    Raises:
        ChecksumMismatchError: If they differ
    """
    actual = calculate_checksum(data)
    if actual != expected:
        raise ChecksumMismatchError(
            f"Checksum mismatch! Expected: {expected.hex()}, Got: {actual.hex()}. "
            f"Data corruption detected."
        )


def reassemble_chunks(payloads: Iterable[bytes]) -> bytes:
    """Rebuild the original file from scanned payloads in any order.

    Args:
        payloads: Raw QR payloads, each [Index:2][Data]

    Returns:
        The original file contents, checksum verified

    Raises:
        MalformedPayloadError, DuplicateChunkError, MissingChunkError:
            If the payloads do not form one complete backup
        MissingChecksumError: If there is no usable checksum code
        ChecksumMismatchError: If the reassembled data is corrupt
    """
    chunks = order_chunks(payloads)
    if not chunks:
        raise MissingChecksumError("No chunks provided - checksum code not found")
    if len(chunks) < 2:
        raise MissingChecksumError(
            "Only one chunk found - a backup holds at least one data code and the checksum code"
        )

    checksum_chunk = chunks[-1]
    if len(checksum_chunk.payload) != CHECKSUM_SIZE:
        raise MissingChecksumError(
            f"Last chunk (index {checksum_chunk.index}) holds {len(checksum_chunk.payload)} bytes, "
            f"not a {CHECKSUM_SIZE}-byte checksum - the checksum code is missing"
        )

    data = b''.join(c.payload for c in chunks[:-1])
    verify_checksum(data, checksum_chunk.payload)
    return data


def find_duplicate_indices(payloads: Iterable[bytes]) -> List[int]:
    """Return the chunk indices that appear in more than one payload."""
    counts = Counter(int.from_bytes(p[:INDEX_SIZE], byteorder='big')
                     for p in payloads if len(p) >= INDEX_SIZE)
    return sorted(i for i, n in counts.items() if n > 1)


def describe_payloads(payloads: List[bytes]) -> Dict[str, object]:
    """Summarize a set of scanned payloads without reassembling to disk.

    Returns:
        Dictionary with symbol count, malformed count, found indices,
        duplicate and missing indices, and checksum status
    """
    malformed = sum(1 for p in payloads if len(p) < INDEX_SIZE)
    chunks = [parse_payload(p) for p in payloads if len(p) >= INDEX_SIZE]
    indices = [c.index for c in chunks]
    found = sorted(set(indices))
    last = found[-1] if found else -1

    report = {
        'symbols': len(payloads),
        'malformed': malformed,
        'indices': found,
        'duplicates': find_duplicate_indices(payloads),
        'missing': sorted(set(range(last + 1)) - set(found)),
    }

    try:
        data = reassemble_chunks(p for p in payloads if len(p) >= INDEX_SIZE)
    except BackupError as e:
        report['checksum'] = f"FAIL ({e})"
        report['file_size'] = None
    else:
        report['checksum'] = 'PASS'
        report['file_size'] = len(data)
    return report


# ============================================================================
# CLI COMMANDS
# ============================================================================

def _fail(message: str) -> None:
    click.secho(f"\nError: {message}", fg='red', err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=VERSION)
def cli():
    """QR Paper Backup - Print files as QR code pages and scan them back.

    Files are split into indexed chunks, one QR code each, followed by a
    checksum code. Scanned pages can be decoded in any order.
    """
    pass


@cli.command()
@click.argument('input_file', type=click.Path())
@click.option('-o', '--output', type=click.Path(), required=True,
              help='Existing directory to write page0.png, page1.png, ... into')
@click.option('-r', '--rows', type=int, default=3, help='QR code rows per page [default: 3]')
@click.option('-c', '--cols', type=int, default=3, help='QR code columns per page [default: 3]')
@click.option('-e', '--error-correction', type=str, default='M',
              help='Error correction level: L(7%), M(15%), Q(25%), H(30%) [default: M]')
@click.option('-v', '--version', 'qr_version', type=int, default=10,
              help='QR code version 1-40, larger holds more per code [default: 10]')
@click.option('--pdf', 'pdf_path', type=click.Path(), default=None,
              help='Also write all pages into one printable PDF')
def encode(input_file, output, rows, cols, error_correction, qr_version, pdf_path):
    """Encode a file into pages of QR codes.

    Example:
        qr-paper-backup encode mydata.bin -o pages/ -r 3 -c 3 -e M -v 10
    """
    try:
        validate_qr_settings(qr_version, error_correction)
        validate_layout(rows, cols)

        click.secho(f"Encoding {input_file} into {output} with {rows} rows and {cols} columns",
                    fg='blue')
        if not os.path.isdir(output):
            raise InvalidArgumentError(f"Output '{output}' is not a directory")

        with open(input_file, 'rb') as f:
            file_data = f.read()

        chunks = create_chunks(file_data, qr_version, error_correction)
        total_data_chunks = len(chunks) - 1
        click.echo(f"QR Configuration: Version {qr_version}, Error Correction {error_correction}")
        click.echo(f"Chunk size: {calculate_chunk_size(qr_version, error_correction):,} bytes per QR code")
        click.echo(f"QR codes required: {len(chunks)} ({total_data_chunks} data + 1 checksum)")

        symbols = []
        with click.progressbar(chunks, label='Creating QR codes') as bar:
            for chunk in bar:
                symbols.append(create_symbol(chunk, total_data_chunks, qr_version, error_correction))

        click.secho("Writing pages...", fg='blue')
        pages = compose_pages(symbols, rows, cols)
        paths = write_pages(pages, output)

        if pdf_path:
            click.secho(f"Writing PDF {pdf_path}...", fg='blue')
            write_pdf(pages, pdf_path)

        click.echo(f"Checksum (CRC-32): {chunks[-1].payload.hex()}")
        click.secho(f"Done, wrote {len(paths)} pages!", fg='green')

    except Exception as e:
        _fail(str(e))


@cli.command()
@click.argument('input_path', type=click.Path())
@click.option('-o', '--output', type=click.Path(), required=True,
              help='Output file path (required)')
def decode(input_path, output):
    """Decode scanned QR code pages back into the original file.

    INPUT_PATH is an image, a PDF scan, or a directory of them.

    A code scanned more than once is accepted when every copy is identical
    (a warning names its index); copies that differ abort the decode.

    Example:
        qr-paper-backup decode scans/ -o recovered.bin
    """
    try:
        click.secho(f"Decoding {input_path} into {output}", fg='blue')
        files = list_scan_files(input_path)
        click.echo(f"Found {len(files)} scan file(s)")

        with click.progressbar(files, label='Scanning images') as bar:
            payloads = collect_payloads(iter_scan_images(bar), echo=click.echo)
        click.echo(f"Found {len(payloads)} QR codes")

        repeated = find_duplicate_indices(payloads)
        if repeated:
            click.secho(f"Warning: chunk indices {repeated} were scanned more than once",
                        fg='yellow', err=True)

        click.secho("Validating checksum", fg='blue')
        file_data = reassemble_chunks(payloads)
        click.secho("Checksum validated!", fg='green')

        with open(output, 'wb') as f:
            f.write(file_data)

        click.secho(f"Done! Recovered {output} ({len(file_data):,} bytes)", fg='green')

    except Exception as e:
        _fail(str(e))


@cli.command()
@click.argument('input_path', type=click.Path())
def info(input_path):
    """Report which QR codes a set of scans contains.

    Example:
        qr-paper-backup info scans/
    """
    try:
        click.echo(f"\nReading: {input_path}")
        files = list_scan_files(input_path)
        payloads = collect_payloads(iter_scan_images(files), echo=click.echo)
        report = describe_payloads(payloads)

        found = report['indices']
        click.echo(f"\n{'='*60}")
        click.echo("QR PAPER BACKUP SCAN REPORT")
        click.echo(f"{'='*60}")
        click.echo(f"Scan Files:          {len(files)}")
        click.echo(f"QR Codes Found:      {report['symbols']}")
        click.echo(f"Malformed Codes:     {report['malformed']}")
        click.echo(f"Chunk Indices:       {found[0]}-{found[-1]} ({len(found)} distinct)" if found
                   else "Chunk Indices:       None")
        click.echo(f"Duplicate Indices:   {report['duplicates'] or 'None'}")
        click.echo(f"Missing Indices:     {report['missing'] or 'None'}")
        click.echo(f"Checksum:            {report['checksum']}")
        if report['file_size'] is not None:
            click.echo(f"File Size:           {report['file_size']:,} bytes")
        click.echo(f"{'='*60}\n")

    except Exception as e:
        _fail(str(e))


if __name__ == '__main__':
    cli()
