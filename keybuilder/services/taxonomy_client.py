"""Scientific and vernacular name lookups against the external taxonomy API."""

from typing import Any, Optional

import httpx

from keybuilder.config import settings


def suggest_scientific_names(scientific_name: str) -> Any:
    response = httpx.get(
        f"{settings.ADB_API_URL}/Taxon/ScientificName/Suggest",
        params={"scientificname": scientific_name},
        timeout=settings.HTTP_TIMEOUT,
    )
    response.raise_for_status()
    return response.json()


def find_taxon_id(scientific_name: str) -> Optional[Any]:
    response = httpx.get(
        f"{settings.ADB_API_URL}/Taxon/ScientificName",
        params={"Scientificname": scientific_name},
        timeout=settings.HTTP_TIMEOUT,
    )
    response.raise_for_status()
    matches = response.json()
    if not matches or not matches[0].get("taxonID"):
        return None
    return matches[0]["taxonID"]


def get_vernacular_name(taxon_id: Any) -> Optional[str]:
    """Preferred vernacular name for an external taxon id, or None if it has none."""
    response = httpx.get(f"{settings.ADB_API_URL}/Taxon/{taxon_id}", timeout=settings.HTTP_TIMEOUT)
    response.raise_for_status()
    preferred = response.json().get("PreferredVernacularName") or {}
    return preferred.get("vernacularName") or None
