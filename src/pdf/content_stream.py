"""Local grayscale conversion by rewriting page content streams.

Colour operators are found with a regex token scan, not a PDF grammar:
``k``/``K`` (CMYK) and ``rg``/``RG`` (RGB) with numeric operands are replaced
by ``g``/``G`` with a single gray level, and ``/DeviceCMYK`` entries in page
resource dictionaries become ``/DeviceGray``. Raster images keep their colour
spaces. String literals containing operator-like words or ``%`` can be
mis-tokenized.
"""

import re

from pypdf import PdfWriter
from pypdf.generic import ArrayObject, DecodedStreamObject, DictionaryObject, NameObject

from core.logging import get_logger
from errors import GrayscaleConversionError
from pdf.documents import document_bytes, load_document

logger = get_logger(__name__)

_COMMENT = re.compile(r"%.*$", re.MULTILINE)
_WHITESPACE = re.compile(r"\s+")
_TOKEN = re.compile(r"([0-9.-]+)|([a-zA-Z]+)|(\S+)")
_NUMBER = re.compile(r"^-?(\d+\.?\d*|\.\d+)$")

# operator -> (operand count, replacement operator)
COLOR_OPERATORS = {
    "k": (4, "g"),
    "K": (4, "G"),
    "rg": (3, "g"),
    "RG": (3, "G"),
}


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def cmyk_to_gray(c: float, m: float, y: float, k: float) -> float:
    """Gray ink coverage of a CMYK colour using the K channel only.

    Cyan, magenta and yellow are ignored so that rich blacks and pure
    blacks both stay solid black after conversion.

    Examples:
        >>> cmyk_to_gray(0.3, 0.9, 0.1, 0.5)
        0.5
    """
    return _clamp(k)


def cmyk_to_gray_luminance(c: float, m: float, y: float, k: float) -> float:
    """Gray ink coverage of a CMYK colour via its approximate RGB luminance."""
    r = (1 - c) * (1 - k)
    g = (1 - m) * (1 - k)
    b = (1 - y) * (1 - k)
    return _clamp(1 - (0.299 * r + 0.587 * g + 0.114 * b))


def rgb_to_gray(r: float, g: float, b: float) -> float:
    """Gray level (0 = black, 1 = white) of an RGB colour.

    Examples:
        >>> rgb_to_gray(1, 1, 1)
        1.0
    """
    return _clamp(0.299 * r + 0.587 * g + 0.114 * b)


def format_number(value: float) -> str:
    """Format an operand without exponent notation or trailing zeros.

    Examples:
        >>> format_number(0.5)
        '0.5'
        >>> format_number(1.0)
        '1'
    """
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


def tokenize(content: str) -> list[str]:
    """Split a content stream into numbers, operator words and other tokens."""
    cleaned = _WHITESPACE.sub(" ", _COMMENT.sub("", content)).strip()
    return [match.group(0) for match in _TOKEN.finditer(cleaned)]


def _gray_level(operator: str, operands: list[float]) -> float:
    if len(operands) == 4:
        # DeviceGray measures lightness, CMYK measures ink
        return 1.0 - cmyk_to_gray(*operands)
    return rgb_to_gray(*operands)


def _rewrite(content: str) -> tuple[str, int]:
    output: list[str] = []
    converted = 0

    for token in tokenize(content):
        rule = COLOR_OPERATORS.get(token)
        if rule is not None:
            arity, replacement = rule
            operands = output[-arity:]
            if len(operands) == arity and all(_NUMBER.match(t) for t in operands):
                gray = _gray_level(token, [float(t) for t in operands])
                del output[-arity:]
                output.extend((format_number(gray), replacement))
                converted += 1
                continue
        output.append(token)

    return " ".join(output), converted


def rewrite_content_stream(content: str) -> str:
    """Rewrite CMYK and RGB colour operators in a content stream to gray.

    Operators whose operands are not all numeric are left untouched.

    Examples:
        >>> rewrite_content_stream("0 0 0 1 k 0 0 m")
        '0 g 0 0 m'
        >>> rewrite_content_stream("1 0 0 RG")
        '0.299 G'
    """
    return _rewrite(content)[0]


def _rewrite_color_spaces(resources) -> int:
    if resources is None:
        return 0
    resources = resources.get_object()
    if not isinstance(resources, DictionaryObject) or "/ColorSpace" not in resources:
        return 0

    color_spaces = resources["/ColorSpace"].get_object()
    rewritten = 0
    for name in list(color_spaces.keys()):
        value = color_spaces[name].get_object()
        family = value[0] if isinstance(value, ArrayObject) and len(value) else value
        if family == "/DeviceCMYK":
            color_spaces[NameObject(name)] = ArrayObject([NameObject("/DeviceGray")])
            rewritten += 1
    return rewritten


def grayscale_pdf_bytes(pdf_bytes: bytes) -> bytes:
    """Convert a document to grayscale by rewriting its content streams.

    Raises:
        GrayscaleConversionError: If a page cannot be rewritten
    """
    writer = PdfWriter(clone_from=load_document(pdf_bytes))
    operators = 0
    spaces = 0

    for number, page in enumerate(writer.pages, start=1):
        try:
            spaces += _rewrite_color_spaces(page.get("/Resources"))

            contents = page.get_contents()
            if contents is None:
                continue

            original = contents.get_data().decode("latin-1")
            rewritten, converted = _rewrite(original)
            if converted:
                stream = DecodedStreamObject()
                stream.set_data(rewritten.encode("latin-1"))
                page.replace_contents(stream)
                operators += converted
        except (KeyError, ValueError, TypeError, AttributeError) as error:
            raise GrayscaleConversionError(
                f"Could not rewrite colours on page {number}: {error}"
            ) from error

    logger.debug(
        "Rewrote {} colour operators and {} colour spaces on {} pages",
        operators,
        spaces,
        len(writer.pages),
    )
    return document_bytes(writer)
