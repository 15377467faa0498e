"""
Test helpers: a table-driven fake geocoder and request payload builders.
"""

from typing import Dict, Optional

from devcamper.exceptions import BadRequestError
from devcamper.services.geocoder import GeocodeResult, Geocoder

BOSTON_ADDRESS = "45 Upton St, Boston MA 02118"
CAMBRIDGE_ADDRESS = "77 Massachusetts Ave, Cambridge MA 02139"
NEWTON_ADDRESS = "1000 Commonwealth Ave, Newton MA 02459"
LEXINGTON_ADDRESS = "1625 Massachusetts Ave, Lexington MA 02420"
PROVIDENCE_ADDRESS = "1 Prospect St, Providence RI 02912"


def _place(lat, lng, street, city, state, zipcode):
    return GeocodeResult(
        latitude=lat,
        longitude=lng,
        formatted_address=f"{street}, {city}, {state} {zipcode}, US",
        street=street,
        city=city,
        state=state,
        zipcode=zipcode,
        country="US",
    )


# Distances from the 02118 centroid: Boston 0.3mi, Cambridge 1.9mi,
# Newton 6.2mi, Lexington 10.8mi, Providence 35mi
PLACES = {
    "02118": _place(42.3389, -71.0720, "", "Boston", "MA", "02118"),
    BOSTON_ADDRESS: _place(42.3430, -71.0722, "45 Upton St", "Boston", "MA", "02118"),
    CAMBRIDGE_ADDRESS: _place(42.3601, -71.0942, "77 Massachusetts Ave", "Cambridge", "MA", "02139"),
    NEWTON_ADDRESS: _place(42.3290, -71.1920, "1000 Commonwealth Ave", "Newton", "MA", "02459"),
    LEXINGTON_ADDRESS: _place(42.4473, -71.2245, "1625 Massachusetts Ave", "Lexington", "MA", "02420"),
    PROVIDENCE_ADDRESS: _place(41.8268, -71.4025, "1 Prospect St", "Providence", "RI", "02912"),
}


class FakeGeocoder(Geocoder):
    """Answers from a fixed table; unknown queries behave like a provider miss."""

    def __init__(self, places: Optional[Dict[str, GeocodeResult]] = None):
        self.places = dict(PLACES if places is None else places)
        self.calls = []

    async def geocode(self, query: str) -> GeocodeResult:
        self.calls.append(query)
        if query not in self.places:
            raise BadRequestError(
                message=f"Could not geocode location '{query}'", field="address"
            )
        return self.places[query]


def bootcamp_payload(name: str = "Devworks Bootcamp", address: str = BOSTON_ADDRESS, **extra) -> dict:
    payload = {
        "name": name,
        "description": f"{name} is a full stack web development bootcamp",
        "website": "https://devworks.example.com",
        "phone": "(111) 111-1111",
        "email": "enroll@devworks.example.com",
        "address": address,
        "careers": ["Web Development", "UI/UX"],
        "housing": True,
        "jobAssistance": True,
        "jobGuarantee": False,
        "acceptGi": True,
    }
    payload.update(extra)
    return payload


def course_payload(title: str = "Front End Web Development", tuition: int = 8000, **extra) -> dict:
    payload = {
        "title": title,
        "description": "HTML, CSS and JavaScript from the ground up",
        "weeks": 8,
        "tuition": tuition,
        "minimumSkill": "beginner",
        "scholarshipAvailable": True,
    }
    payload.update(extra)
    return payload


def review_payload(rating: int = 8, **extra) -> dict:
    payload = {"title": "Learned a ton", "text": "Great instructors and projects", "rating": rating}
    payload.update(extra)
    return payload

