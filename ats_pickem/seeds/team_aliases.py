"""
Default team alias table

TEAM_ALIASES maps each canonical team name to the spellings seen on line
sheets and in provider feeds. build_alias_groups() can derive the same shape
from any name -> team id mapping (for example a logo mapping) by grouping
names that share an id and choosing a canonical name for each group; the
`aliases seed --mapping` command seeds from such a file.
"""

import logging

from ats_pickem import db
from ats_pickem.models import TeamAlias

logger = logging.getLogger(__name__)

# Schools whose short form is the official name
KNOWN_CANONICALS = {
    name.casefold(): name
    for name in (
        "BYU",
        "SMU",
        "TCU",
        "UCF",
        "UCLA",
        "UNLV",
        "USC",
        "LSU",
        "UAB",
        "UTEP",
        "UTSA",
    )
}

TEAM_ALIASES = {
    "Abilene Christian": ["Abilene Christian"],
    "Air Force": ["Air Force"],
    "Akron": ["Akron"],
    "Alabama": ["Alabama"],
    "Albany": ["Albany"],
    "Appalachian State": ["Appalachian State", "App State"],
    "Arizona": ["Arizona"],
    "Arizona State": ["Arizona State", "ASU"],
    "Arkansas": ["Arkansas"],
    "Arkansas State": ["Arkansas State", "Ark State"],
    "Army": ["Army"],
    "Auburn": ["Auburn"],
    "Ball State": ["Ball State"],
    "Baylor": ["Baylor"],
    "Boise State": ["Boise State", "Boise St", "Boise St."],
    "Boston College": ["Boston College", "BC"],
    "Bowling Green": ["Bowling Green", "BGSU"],
    "Bryant": ["Bryant"],
    "Buffalo": ["Buffalo"],
    "BYU": ["BYU", "Brigham Young"],
    "California": ["California", "Cal"],
    "Central Arkansas": ["Central Arkansas"],
    "Central Michigan": ["Central Michigan", "CMU"],
    "Charlotte": ["Charlotte"],
    "Cincinnati": ["Cincinnati"],
    "Clemson": ["Clemson"],
    "Coastal Carolina": ["Coastal Carolina"],
    "Colorado": ["Colorado"],
    "Colorado State": ["Colorado State", "Colorado St", "Colorado St."],
    "Connecticut": ["Connecticut", "UConn"],
    "Delaware": ["Delaware"],
    "Delaware State": ["Delaware State"],
    "Duke": ["Duke"],
    "East Carolina": ["East Carolina", "ECU"],
    "Eastern Kentucky": ["Eastern Kentucky"],
    "Eastern Michigan": ["Eastern Michigan", "EMU"],
    "Elon": ["Elon"],
    "Florida": ["Florida"],
    "Florida Atlantic": ["Florida Atlantic", "FAU"],
    "Florida International": ["Florida International", "FIU"],
    "Florida State": ["Florida State", "Florida St", "Florida St.", "FSU"],
    "Fresno State": ["Fresno State", "Fresno St", "Fresno St."],
    "Georgia": ["Georgia"],
    "Georgia Southern": ["Georgia Southern", "Ga Southern"],
    "Georgia State": ["Georgia State", "Ga State"],
    "Georgia Tech": ["Georgia Tech", "Ga Tech", "GT"],
    "Hawaii": ["Hawaii"],
    "Houston": ["Houston"],
    "Idaho": ["Idaho"],
    "Illinois": ["Illinois"],
    "Indiana": ["Indiana"],
    "Iowa": ["Iowa"],
    "Iowa State": ["Iowa State", "Iowa St", "Iowa St."],
    "Jacksonville State": [
        "Jacksonville State",
        "Jacksonville St",
        "Jacksonville St.",
        "Jax State",
    ],
    "James Madison": ["James Madison", "JMU"],
    "Kansas": ["Kansas"],
    "Kansas State": ["Kansas State", "Kansas St", "Kansas St.", "K-State", "KSU"],
    "Kennesaw State": ["Kennesaw State"],
    "Kent State": ["Kent State", "Kent St", "Kent St."],
    "Kentucky": ["Kentucky"],
    "Lamar": ["Lamar"],
    "Liberty": ["Liberty"],
    "Louisiana": ["Louisiana", "ULL", "UL Lafayette"],
    "Louisiana Tech": ["Louisiana Tech", "La Tech"],
    "Louisville": ["Louisville"],
    "LSU": ["LSU", "Louisiana State"],
    "Marshall": ["Marshall"],
    "Maryland": ["Maryland"],
    "Memphis": ["Memphis"],
    "Merrimack": ["Merrimack"],
    "Miami": ["Miami", "Miami FL", "Miami (FL)", "The U"],
    "Miami (OH)": ["Miami (OH)", "Miami OH"],
    "Michigan": ["Michigan"],
    "Michigan State": [
        "Michigan State",
        "Michigan St",
        "Michigan St.",
        "MSU",
        "Mich State",
        "Mich St",
        "Mich St.",
    ],
    "Middle Tennessee": ["Middle Tennessee", "Middle Tennessee State", "MTSU", "MT"],
    "Minnesota": ["Minnesota"],
    "Mississippi State": [
        "Mississippi State",
        "Mississippi St",
        "Mississippi St.",
        "Miss State",
        "Miss St",
        "Miss St.",
    ],
    "Missouri": ["Missouri", "Mizzou"],
    "Missouri State": ["Missouri State"],
    "Navy": ["Navy"],
    "Nebraska": ["Nebraska"],
    "Nevada": ["Nevada"],
    "New Mexico": ["New Mexico"],
    "New Mexico State": [
        "New Mexico State",
        "New Mexico St",
        "New Mexico St.",
        "NMSU",
    ],
    "North Arizona": ["North Arizona"],
    "North Carolina": ["North Carolina", "UNC"],
    "NC State": ["NC State", "N.C. State", "North Carolina State", "NCSU"],
    "North Dakota": ["North Dakota"],
    "North Texas": ["North Texas"],
    "Northern Illinois": ["Northern Illinois", "NIU"],
    "Northwestern": ["Northwestern"],
    "Notre Dame": ["Notre Dame"],
    "Ohio": ["Ohio"],
    "Ohio State": ["Ohio State", "Ohio St", "Ohio St.", "OSU"],
    "Oklahoma": ["Oklahoma"],
    "Oklahoma State": [
        "Oklahoma State",
        "Oklahoma St",
        "Oklahoma St.",
        "OK State",
        "OK St",
        "OK St.",
    ],
    "Old Dominion": ["Old Dominion", "ODU"],
    "Ole Miss": ["Ole Miss", "Mississippi"],
    "Oregon": ["Oregon"],
    "Oregon State": ["Oregon State", "Oregon St", "Oregon St."],
    "Penn State": ["Penn State", "Penn St", "Penn St.", "PSU"],
    "Pittsburgh": ["Pittsburgh", "Pitt"],
    "Portland State": ["Portland State"],
    "Purdue": ["Purdue"],
    "Rice": ["Rice"],
    "Rutgers": ["Rutgers"],
    "Sam Houston": ["Sam Houston", "Sam Houston State", "SHSU"],
    "San Diego State": ["San Diego State", "San Diego St", "San Diego St.", "SDSU"],
    "San Jose State": ["San Jose State", "San Jose St", "San Jose St.", "SJSU"],
    "SE Louisiana": ["SE Louisiana"],
    "SF Austin": ["SF Austin"],
    "SMU": ["SMU", "Southern Methodist"],
    "South Alabama": ["South Alabama"],
    "South Carolina": ["South Carolina"],
    "South Florida": ["South Florida", "USF"],
    "Southern Miss": [
        "Southern Miss",
        "Southern Mississippi",
        "So Miss",
        "So Mississippi",
    ],
    "St Francis PA": ["St Francis PA"],
    "Stanford": ["Stanford"],
    "Stony Brook": ["Stony Brook"],
    "Syracuse": ["Syracuse", "Cuse"],
    "TCU": ["TCU", "Texas Christian"],
    "Temple": ["Temple"],
    "Tennessee": ["Tennessee", "Tenn"],
    "Texas": ["Texas"],
    "Texas A&M": ["Texas A&M", "Texas A&amp;M", "TAMU", "A&M"],
    "Texas State": ["Texas State", "Texas St", "Texas St.", "TXST"],
    "Texas Tech": ["Texas Tech"],
    "Toledo": ["Toledo"],
    "Troy": ["Troy"],
    "Tulane": ["Tulane"],
    "Tulsa": ["Tulsa"],
    "UAB": ["UAB"],
    "UCF": ["UCF"],
    "UCLA": ["UCLA"],
    "UL Monroe": ["UL Monroe", "ULM", "Louisiana Monroe"],
    "UMass": ["UMass", "Massachusetts"],
    "UNLV": ["UNLV"],
    "USC": ["USC", "Southern California", "Southern Cal"],
    "UT Martin": ["UT Martin"],
    "UTEP": ["UTEP", "Texas El Paso"],
    "UTSA": ["UTSA", "UT San Antonio"],
    "Utah": ["Utah"],
    "Utah State": ["Utah State", "Utah St", "Utah St."],
    "Vanderbilt": ["Vanderbilt", "Vandy"],
    "Virginia": ["Virginia", "UVA"],
    "Virginia Tech": ["Virginia Tech", "VA Tech", "VT", "VPI"],
    "Wake Forest": ["Wake Forest", "Wake"],
    "Washington": ["Washington"],
    "Washington State": [
        "Washington State",
        "Washington St",
        "Washington St.",
        "Wazzu",
        "WSU",
    ],
    "West Virginia": ["West Virginia", "WVU"],
    "Western Kentucky": ["Western Kentucky", "WKU"],
    "Western Michigan": ["Western Michigan", "WMU"],
    "Wisconsin": ["Wisconsin", "Wisc"],
    "Wyoming": ["Wyoming"],
}


def is_likely_abbreviation(name):
    """Heuristic for short forms like 'FSU', 'Ohio St' or 'N.C. State'"""
    if len(name) <= 4:
        return True

    letters = [c for c in name if c.isalpha()]
    if letters and all(c.isupper() for c in letters):
        return True

    if "." in name:
        return True

    return name.lower().endswith(" st")


def pick_canonical_name(names):
    """Choose the canonical spelling among names that refer to one team"""
    if len(names) == 1:
        return names[0]

    for name in names:
        known = KNOWN_CANONICALS.get(name.casefold())
        if known:
            return known

    candidates = [n for n in names if not is_likely_abbreviation(n)] or list(names)

    # "Florida State" beats "Florida St" and "FSU"
    with_state = [n for n in candidates if " State" in n]
    if with_state:
        return max(with_state, key=len)

    return sorted(candidates, key=lambda n: (-len(n), n))[0]


def build_alias_groups(name_to_team_id):
    """Group a name -> team id mapping into canonical -> aliases"""
    names_by_team = {}
    for name, team_id in name_to_team_id.items():
        names_by_team.setdefault(team_id, []).append(name)

    groups = {}
    for names in names_by_team.values():
        groups[pick_canonical_name(names)] = names
    return groups


def iter_alias_pairs(groups=None):
    """(alias, canonical_name) pairs sorted by canonical name then alias"""
    groups = TEAM_ALIASES if groups is None else groups
    for canonical_name in sorted(groups):
        for alias in sorted(groups[canonical_name]):
            yield alias, canonical_name


def seed_team_aliases(groups=None):
    """
    Insert missing aliases and repoint changed ones.

    Returns (created, updated). The caller refreshes the alias cache.
    """
    existing = {row.alias.casefold(): row for row in TeamAlias.query.all()}
    created = 0
    updated = 0

    for alias, canonical_name in iter_alias_pairs(groups):
        row = existing.get(alias.casefold())
        if row is None:
            row = TeamAlias(alias=alias, canonical_name=canonical_name)
            db.session.add(row)
            existing[alias.casefold()] = row
            created += 1
        elif row.canonical_name != canonical_name:
            row.canonical_name = canonical_name
            updated += 1

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"Seeded team aliases: {created} created, {updated} updated")
    return created, updated
