"""Registry entities for the sounding archive.

Defines enums and Pydantic v2 models for sites, sounding types, and
geographic locations.  All models use frozen config so a record's identity
and natural key can never change after construction; the registries hand
back refreshed copies instead of mutating in place.

Identity state:
    - ``id is None``  -- unvalidated, not yet known to match an index row
    - ``id > 0``      -- valid/known, assigned by the registry (SQLite rowids start at 1)

Each entity also exposes its "settable subset" as a separate payload model
(``SiteInfo``, ``SoundingTypeSettings``, ``LocationSettings``).  Registry
``update`` calls write only these fields.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# Coordinates are stored as integer microdegrees so equality is exact and indexable.
COORDINATE_SCALE = 1_000_000


def quantize_degrees(value: float) -> int:
    """Convert decimal degrees to the integer microdegree form used by the index."""
    return int(round(value * COORDINATE_SCALE))


def dequantize_degrees(value: int) -> float:
    """Convert integer microdegrees back to decimal degrees."""
    return value / COORDINATE_SCALE


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class StateProv(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """State/province abbreviations used to group sites."""

    AL = "AL"  # Alabama
    AK = "AK"  # Alaska
    AZ = "AZ"  # Arizona
    AR = "AR"  # Arkansas
    CA = "CA"  # California
    CO = "CO"  # Colorado
    CT = "CT"  # Connecticut
    DE = "DE"  # Delaware
    FL = "FL"  # Florida
    GA = "GA"  # Georgia
    HI = "HI"  # Hawaii
    ID = "ID"  # Idaho
    IL = "IL"  # Illinois
    IN = "IN"  # Indiana
    IA = "IA"  # Iowa
    KS = "KS"  # Kansas
    KY = "KY"  # Kentucky
    LA = "LA"  # Louisiana
    ME = "ME"  # Maine
    MD = "MD"  # Maryland
    MA = "MA"  # Massachusetts
    MI = "MI"  # Michigan
    MN = "MN"  # Minnesota
    MS = "MS"  # Mississippi
    MO = "MO"  # Missouri
    MT = "MT"  # Montana
    NE = "NE"  # Nebraska
    NV = "NV"  # Nevada
    NH = "NH"  # New Hampshire
    NJ = "NJ"  # New Jersey
    NM = "NM"  # New Mexico
    NY = "NY"  # New York
    NC = "NC"  # North Carolina
    ND = "ND"  # North Dakota
    OH = "OH"  # Ohio
    OK = "OK"  # Oklahoma
    OR = "OR"  # Oregon
    PA = "PA"  # Pennsylvania
    RI = "RI"  # Rhode Island
    SC = "SC"  # South Carolina
    SD = "SD"  # South Dakota
    TN = "TN"  # Tennessee
    TX = "TX"  # Texas
    UT = "UT"  # Utah
    VT = "VT"  # Vermont
    VA = "VA"  # Virginia
    WA = "WA"  # Washington
    WV = "WV"  # West Virginia
    WI = "WI"  # Wisconsin
    WY = "WY"  # Wyoming
    # US commonwealth and territories
    AS = "AS"  # American Samoa
    DC = "DC"  # District of Columbia
    FM = "FM"  # Federated States of Micronesia
    MH = "MH"  # Marshall Islands
    MP = "MP"  # Northern Mariana Islands
    PW = "PW"  # Palau
    PR = "PR"  # Puerto Rico
    VI = "VI"  # Virgin Islands


class FileType(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Encoding of a raw sounding payload.

    Selects the decoder used by ``Archive.retrieve`` and the extension of
    files written by ``Archive.export_to``.
    """

    BUFKIT = "BUFKIT"  # Text format used by model point forecasts
    BUFR = "BUFR"      # WMO binary format

    @property
    def extension(self) -> str:
        return {FileType.BUFKIT: "buf", FileType.BUFR: "bufr"}[self]

    @property
    def is_text(self) -> bool:
        return self is FileType.BUFKIT


# ---------------------------------------------------------------------------
# Update payloads -- the mutable subset of each entity.
# ---------------------------------------------------------------------------

class SiteInfo(BaseModel):
    """Descriptive site fields that may change after the site is registered."""

    model_config = ConfigDict(frozen=True)

    long_name: str | None = None
    state: StateProv | None = None
    notes: str | None = None
    is_mobile: bool = False


class SoundingTypeSettings(BaseModel):
    """Sounding type fields that may change after the type is registered."""

    model_config = ConfigDict(frozen=True)

    observed: bool = False
    hours_between: int | None = Field(default=None, gt=0)


class LocationSettings(BaseModel):
    """The only mutable location field: its offset from UTC."""

    model_config = ConfigDict(frozen=True)

    tz_offset_seconds: int | None = None


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

class Site(BaseModel):
    """A fixed or mobile sounding site identified by a short station code.

    ``short_name`` is the natural key and is normalized to upper case, so
    ``Site(short_name="kmso")`` and ``Site(short_name="KMSO")`` refer to the
    same index row.
    """

    model_config = ConfigDict(frozen=True)

    short_name: str                     # Station id (e.g. "KMSO", WMO number)
    long_name: str | None = None        # Human readable name ("Missoula")
    state: StateProv | None = None      # State/province for grouping queries
    notes: str | None = None            # Free-text notes
    is_mobile: bool = False             # True for mobile platforms (ships, field campaigns)
    id: int | None = None               # Row id, set by the registry

    @field_validator("short_name")
    @classmethod
    def _normalize_short_name(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not normalized:
            raise ValueError("short_name must not be empty")
        if "_" in normalized:
            # "_" separates the tokens of stored file names.
            raise ValueError(f"short_name must not contain '_': {normalized!r}")
        return normalized

    @property
    def is_known(self) -> bool:
        return self.id is not None and self.id > 0

    @property
    def incomplete(self) -> bool:
        """True when the long name or state is missing.  Notes are ignored."""
        return self.long_name is None or self.state is None

    @property
    def info(self) -> SiteInfo:
        return SiteInfo(
            long_name=self.long_name,
            state=self.state,
            notes=self.notes,
            is_mobile=self.is_mobile,
        )

    def with_info(self, info: SiteInfo) -> Site:
        return self.model_copy(update=info.model_dump())

    def with_long_name(self, long_name: str | None) -> Site:
        return self.model_copy(update={"long_name": long_name})

    def with_notes(self, notes: str | None) -> Site:
        return self.model_copy(update={"notes": notes})

    def with_state_prov(self, state: StateProv | str | None) -> Site:
        return self.model_copy(update={"state": StateProv(state) if state is not None else None})

    def set_mobile(self, is_mobile: bool) -> Site:
        return self.model_copy(update={"is_mobile": is_mobile})


class SoundingType(BaseModel):
    """A named source of soundings: a model (GFS, NAM) or an observing network.

    ``hours_between`` is the expected cadence of initializations or launches;
    ``None`` means the cadence is unknown and inventories will not report
    missing runs for this type.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    observed: bool = False
    file_type: FileType = FileType.BUFKIT
    hours_between: int | None = Field(default=None, gt=0)
    id: int | None = None

    @field_validator("source")
    @classmethod
    def _normalize_source(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not normalized:
            raise ValueError("source must not be empty")
        return normalized

    @classmethod
    def new_model(
        cls,
        source: str,
        hours_between: int | None = None,
        file_type: FileType = FileType.BUFKIT,
    ) -> SoundingType:
        """A model-generated sounding type."""
        return cls(source=source, observed=False, file_type=file_type, hours_between=hours_between)

    @classmethod
    def new_observed(
        cls,
        source: str,
        hours_between: int | None = None,
        file_type: FileType = FileType.BUFR,
    ) -> SoundingType:
        """An observed (radiosonde, aircraft) sounding type."""
        return cls(source=source, observed=True, file_type=file_type, hours_between=hours_between)

    @property
    def is_known(self) -> bool:
        return self.id is not None and self.id > 0

    @property
    def is_modeled(self) -> bool:
        return not self.observed

    @property
    def settings(self) -> SoundingTypeSettings:
        return SoundingTypeSettings(observed=self.observed, hours_between=self.hours_between)

    def with_settings(self, settings: SoundingTypeSettings) -> SoundingType:
        return self.model_copy(update=settings.model_dump())


class Location(BaseModel):
    """A geographic point with elevation, decoupled from Site.

    One site may be recorded at several locations over time (model grid
    changes, relocated launch sites).  Construction fails with a pydantic
    ``ValidationError`` when a coordinate is outside its canonical range.
    """

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    elevation_m: int
    tz_offset_seconds: int | None = None
    id: int | None = None

    @classmethod
    def checked(
        cls,
        latitude: float,
        longitude: float,
        elevation_m: int,
        tz_offset_seconds: int | None = None,
    ) -> Location | None:
        """Like the constructor, but returns ``None`` for out-of-range coordinates."""
        try:
            return cls(
                latitude=latitude,
                longitude=longitude,
                elevation_m=elevation_m,
                tz_offset_seconds=tz_offset_seconds,
            )
        except ValidationError:
            return None

    @property
    def natural_key(self) -> tuple[int, int, int]:
        return (
            quantize_degrees(self.latitude),
            quantize_degrees(self.longitude),
            self.elevation_m,
        )

    @property
    def is_known(self) -> bool:
        return self.id is not None and self.id > 0

    @property
    def settings(self) -> LocationSettings:
        return LocationSettings(tz_offset_seconds=self.tz_offset_seconds)

    def with_tz_offset(self, tz_offset_seconds: int | None) -> Location:
        return self.model_copy(update={"tz_offset_seconds": tz_offset_seconds})
