"""Input models for booklet assembly.

Pydantic models for the caller-supplied book metadata, fragment descriptors
and build options. All of them are read-only for the duration of a build.
"""

from datetime import date
from enum import Enum
from typing import Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pdf.utils import normalize_date


class ColorMode(str, Enum):
    """Print colour mode of a fragment."""

    COLOR = "color"
    GRAYSCALE = "grayscale"

    @classmethod
    def from_code(cls, value: Union["ColorMode", str, int]) -> "ColorMode":
        """Accept enum values, their names, or channel counts (1 = gray, 4 = CMYK)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            if value == 1:
                return cls.GRAYSCALE
            if value == 4:
                return cls.COLOR
            raise ValueError(f"Invalid colour code: {value}. Must be 1 or 4")
        return cls(str(value).lower())


class GrayscaleStrategy(str, Enum):
    """How grayscale fragments are converted."""

    REMOTE = "remote"
    LOCAL = "local"


class CompressionLevel(str, Enum):
    """Compression preset applied to the final document."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BookFormat(str, Enum):
    """Trim format of the printed booklet."""

    A4 = "A4"
    A5 = "A5"
    A6 = "A6"


class DateItem(BaseModel):
    """A user-defined date label; the date stays raw until merging."""

    model_config = ConfigDict(frozen=True)

    date: str = Field(..., description="ISO-like date string")
    name: str = Field(..., description="Label printed on the planner day")

    @field_validator("date", mode="before")
    @classmethod
    def date_to_string(cls, v):
        """YAML job files load unquoted dates as ``date`` objects."""
        if isinstance(v, date):
            return v.isoformat()
        return v


class Period(BaseModel):
    """Planner period. A missing start means today; a missing end means one year."""

    model_config = ConfigDict(frozen=True)

    start: Optional[date] = Field(None, description="First day of the period")
    end: Optional[date] = Field(None, description="Last day of the period")

    @field_validator("start", "end", mode="before")
    @classmethod
    def strip_time(cls, v):
        """Accept timestamps by keeping only their date portion."""
        if isinstance(v, str):
            return normalize_date(v) or None
        return v


class BookDetails(BaseModel):
    """Book metadata supplied by the caller."""

    model_config = ConfigDict(frozen=True)

    title: str = Field("", description="Title printed on the cover")
    code: Optional[str] = Field(None, description="Holiday subdivision code, e.g. DE-SL")
    country: str = Field("DE", description="ISO country code for holidays")
    period: Period = Field(default_factory=Period, description="Planner period")
    add_holidays: bool = Field(False, description="Print public/school holidays")
    custom_dates: list[DateItem] = Field(
        default_factory=list, description="User-defined date labels"
    )


class FragmentDescriptor(BaseModel):
    """One independently authored PDF fragment."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Fragment identifier")
    type: str = Field(..., description="cover, planner, or a content type")
    idx: int = Field(0, description="Ordering index within the book")
    source: Union[bytes, str] = Field(..., description="URL/path or raw PDF bytes")
    color: ColorMode = Field(ColorMode.COLOR, description="Print colour mode")
    grayscale_strategy: Optional[GrayscaleStrategy] = Field(
        None, description="Overrides the build's grayscale strategy"
    )

    @field_validator("type")
    @classmethod
    def normalize_type(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("color", mode="before")
    @classmethod
    def parse_color(cls, v):
        return ColorMode.from_code(v)


class PageNumberOptions(BaseModel):
    """Page number appearance."""

    font_size: Optional[int] = Field(None, ge=4, le=48)
    color: tuple[float, float, float, float] = Field(
        (0.0, 0.0, 0.0, 0.95), description="CMYK fill colour"
    )
    margin: Optional[int] = Field(None, ge=0, le=200)


class BuildOptions(BaseModel):
    """Options for a single assembly run."""

    preview_mode: bool = Field(False, description="Build a capped preview")
    add_page_numbers: bool = Field(True, description="Number the content pages")
    page_numbers: PageNumberOptions = Field(default_factory=PageNumberOptions)
    add_watermark: bool = Field(False, description="Overlay the watermark image")
    compression: CompressionLevel = Field(CompressionLevel.LOW)
    book_format: Optional[BookFormat] = Field(
        None, description="Format of alignment blanks (defaults to settings)"
    )
    grayscale_strategy: Optional[GrayscaleStrategy] = Field(
        None, description="Default grayscale strategy (defaults to settings)"
    )
    color_map: dict[str, ColorMode] = Field(
        default_factory=dict, description="Per-fragment colour overrides"
    )

    @field_validator("color_map", mode="before")
    @classmethod
    def parse_color_map(cls, v):
        if isinstance(v, Mapping):
            return {str(k): ColorMode.from_code(code) for k, code in v.items()}
        return v
