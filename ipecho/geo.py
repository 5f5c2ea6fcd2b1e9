from ipecho.config import CountryNames, MissingGeoPolicy, Settings
from ipecho.countries import COUNTRY_NAMES_ZH
from ipecho.messages import get_messages
from ipecho.models.common import GeoRecord
from ipecho.models.request_models import PlatformMetadata

MISSING_SENTINEL = "N/A"

GEO_FIELDS: tuple[str, ...] = tuple(GeoRecord.model_fields)


def localize_country(code: str | None, unknown: str) -> str:
    """Display name for an ISO country code; unmapped codes pass through unchanged."""
    if not code:
        return unknown
    return COUNTRY_NAMES_ZH.get(code.upper(), code)


def build_geo_record(metadata: PlatformMetadata, settings: Settings) -> GeoRecord:
    """Copy the platform's geolocation fields into a GeoRecord.

    Never fails. With the sentinel policy every missing field becomes "N/A";
    with the omit policy it stays None and is left out of the JSON payload.
    """
    fill = MISSING_SENTINEL if settings.missing_geo is MissingGeoPolicy.sentinel else None
    values: dict[str, str | None] = {}
    for field in GEO_FIELDS:
        value = getattr(metadata, field, None)
        values[field] = value if value else fill

    if settings.country_names is CountryNames.localized:
        unknown = get_messages(settings.language).unknown_country
        values["country"] = localize_country(metadata.country, unknown)

    return GeoRecord(**values)


def geo_summary(record: GeoRecord) -> str:
    """One-line "<country>, <city>" summary; missing parts are dropped."""
    parts = [part for part in (record.country, record.city) if part]
    return ", ".join(parts) or MISSING_SENTINEL
