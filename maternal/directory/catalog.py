"""Built-in facility catalog: referral and district hospitals across Rwanda.

Sample reference data. Deployments can point ``DIRECTORY_CATALOG_PATH`` at a JSON
file with the same fields instead (see :func:`maternal.directory.service.load_catalog`).
"""

from maternal.domain.models import Coordinates, Facility, HotlineContact

_EMERGENCY_HOURS = "24/7 Emergency Services"

FACILITIES: tuple[Facility, ...] = (
    # Kigali City, Gasabo District
    Facility(
        facility_id=1,
        name="King Faisal Hospital",
        district="Gasabo",
        sector="Kacyiru",
        location="Kacyiru, Kigali",
        phone="3939",
        emergency_phone="+250 788 309 000",
        hours=_EMERGENCY_HOURS,
        rating=4.8,
        services=frozenset({"Emergency", "Maternity", "Pediatrics", "Surgery"}),
        coordinates=Coordinates(lat=-1.9536, lng=30.0906),
    ),
    Facility(
        facility_id=2,
        name="Kibagabaga District Hospital",
        district="Gasabo",
        sector="Remera",
        location="Remera, Kigali",
        phone="+250 252 586 555",
        emergency_phone="+250 788 309 001",
        hours=_EMERGENCY_HOURS,
        rating=4.5,
        services=frozenset({"Emergency", "Maternity", "General Medicine"}),
        coordinates=Coordinates(lat=-1.9442, lng=30.0946),
    ),
    Facility(
        facility_id=3,
        name="Kigali University Teaching Hospital (CHUK)",
        district="Gasabo",
        sector="Kacyiru",
        location="Kacyiru, Kigali",
        phone="+250 788 309 002",
        emergency_phone="+250 788 309 002",
        hours=_EMERGENCY_HOURS,
        rating=4.7,
        services=frozenset({"Emergency", "Maternity", "Pediatrics", "Surgery", "ICU"}),
        coordinates=Coordinates(lat=-1.9536, lng=30.0906),
    ),
    # Kigali City, Kicukiro District
    Facility(
        facility_id=4,
        name="Rwanda Military Hospital (RMH)",
        district="Kicukiro",
        sector="Kanombe",
        location="Kanombe, Kigali",
        phone="4060",
        emergency_phone="+250 788 309 003",
        hours=_EMERGENCY_HOURS,
        rating=4.6,
        services=frozenset({"Emergency", "Maternity", "Surgery", "ICU"}),
        coordinates=Coordinates(lat=-1.9833, lng=30.1167),
    ),
    Facility(
        facility_id=5,
        name="Masaka District Hospital",
        district="Kicukiro",
        sector="Masaka",
        location="Masaka, Kigali",
        phone="+250 788 309 004",
        emergency_phone="+250 788 309 004",
        hours=_EMERGENCY_HOURS,
        rating=4.3,
        services=frozenset({"Emergency", "Maternity", "General Medicine"}),
        coordinates=Coordinates(lat=-2.0167, lng=30.1000),
    ),
    # Kigali City, Nyarugenge District
    Facility(
        facility_id=6,
        name="Kigali Central Hospital (CHK)",
        district="Nyarugenge",
        sector="Nyarugenge",
        location="Nyarugenge, Kigali",
        phone="+250 782 749 660",
        emergency_phone="+250 788 309 005",
        hours=_EMERGENCY_HOURS,
        rating=4.5,
        services=frozenset({"Emergency", "Maternity", "Pediatrics", "Surgery"}),
        coordinates=Coordinates(lat=-1.9536, lng=30.0588),
    ),
    Facility(
        facility_id=7,
        name="Muhima District Hospital",
        district="Nyarugenge",
        sector="Muhima",
        location="Muhima, Kigali",
        phone="+250 788 309 006",
        emergency_phone="+250 788 309 006",
        hours=_EMERGENCY_HOURS,
        rating=4.4,
        services=frozenset({"Emergency", "Maternity", "General Medicine"}),
        coordinates=Coordinates(lat=-1.9536, lng=30.0588),
    ),
    # Southern Province, Huye District
    Facility(
        facility_id=8,
        name="Butare University Teaching Hospital (CHUB)",
        district="Huye",
        sector="Huye",
        location="Huye, Southern Province",
        phone="+250 788 309 007",
        emergency_phone="+250 788 309 007",
        hours=_EMERGENCY_HOURS,
        rating=4.6,
        services=frozenset({"Emergency", "Maternity", "Pediatrics", "Surgery", "ICU"}),
        coordinates=Coordinates(lat=-2.5967, lng=29.7400),
    ),
    # Western Province, Rubavu District
    Facility(
        facility_id=9,
        name="Gisenyi District Hospital",
        district="Rubavu",
        sector="Gisenyi",
        location="Gisenyi, Western Province",
        phone="+250 788 309 008",
        emergency_phone="+250 788 309 008",
        hours=_EMERGENCY_HOURS,
        rating=4.4,
        services=frozenset({"Emergency", "Maternity", "General Medicine"}),
        coordinates=Coordinates(lat=-1.7025, lng=29.2569),
    ),
    # Northern Province, Musanze District
    Facility(
        facility_id=10,
        name="Ruhengeri District Hospital",
        district="Musanze",
        sector="Muhoza",
        location="Musanze, Northern Province",
        phone="+250 788 309 009",
        emergency_phone="+250 788 309 009",
        hours=_EMERGENCY_HOURS,
        rating=4.5,
        services=frozenset({"Emergency", "Maternity", "Pediatrics", "Surgery"}),
        coordinates=Coordinates(lat=-1.4992, lng=29.6344),
    ),
    # Eastern Province, Rwamagana District
    Facility(
        facility_id=11,
        name="Rwamagana District Hospital",
        district="Rwamagana",
        sector="Rwamagana",
        location="Rwamagana, Eastern Province",
        phone="+250 788 309 010",
        emergency_phone="+250 788 309 010",
        hours=_EMERGENCY_HOURS,
        rating=4.3,
        services=frozenset({"Emergency", "Maternity", "General Medicine"}),
        coordinates=Coordinates(lat=-1.9486, lng=30.4347),
    ),
)

EMERGENCY_CONTACTS: tuple[HotlineContact, ...] = (
    HotlineContact(
        name="Emergency Hotline",
        phone="112",
        description="24/7 emergency medical assistance",
    ),
    HotlineContact(
        name="Maternal Health Support",
        phone="116",
        description="Specialized maternal health support",
    ),
    HotlineContact(
        name="Mental Health Crisis",
        phone="114",
        description="Mental health crisis intervention",
    ),
)
