"""
Catalog of suggested services and their usual slot counts.
Any service name is accepted; the catalog only provides defaults.
"""

import logging
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

OTHER_SERVICE = "Other"

# Suggested names, in display order
SUGGESTED_SERVICES = [
    "Netflix",
    "Spotify",
    "Disney+",
    "Prime Video",
    "YouTube Premium",
    "VPN Service",
    "Anghami",
    OTHER_SERVICE,
]

SERVICE_DEFAULTS: Dict[str, Dict] = {
    "Netflix": {"default_slots": 5},
    "Spotify": {"default_slots": 6},
    "Disney+": {"default_slots": 4},
    "Prime Video": {"default_slots": 3},
    "YouTube Premium": {"default_slots": 5},
    "VPN Service": {"default_slots": 5},
    OTHER_SERVICE: {"default_slots": 1},
}


def is_suggested_service(service_name: str) -> bool:
    return service_name in SUGGESTED_SERVICES


def find_suggested_service(name: str) -> Optional[str]:
    """Match a typed name against the suggestions, ignoring case"""
    lowered = name.strip().lower()
    for service in SUGGESTED_SERVICES:
        if service.lower() == lowered:
            return service
    return None


def get_default_slots(service_name: str) -> int:
    """Usual number of shared slots for a service; unknown services get Other's"""
    defaults = SERVICE_DEFAULTS.get(service_name) or SERVICE_DEFAULTS[OTHER_SERVICE]
    return defaults["default_slots"]


def list_services() -> List[Dict]:
    """Suggested services with their default slot counts"""
    return [
        {"name": name, "default_slots": get_default_slots(name)}
        for name in SUGGESTED_SERVICES
    ]
