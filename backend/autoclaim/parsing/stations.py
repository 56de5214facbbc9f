"""Station tables shared by the extractor and the claim form builder."""

# UIC-style station code -> display name
STATION_NAMES: dict[str, str] = {
    # UK
    "GBSPX": "London St Pancras",
    "GBEBS": "Ebbsfleet International",
    "GBASH": "Ashford International",
    # France
    "FRCFK": "Calais-Fréthun",
    "FRLPD": "Lille Europe",
    "FRPLY": "Paris Gare du Nord",
    # Belgium
    "BEBMI": "Brussels Midi/Zuid",
    # Netherlands
    "NLASC": "Amsterdam Centraal",
    "NLRDA": "Rotterdam Centraal",
    # Germany
    "DECGN": "Cologne Hbf",
}

# lower-cased spelling seen in emails -> canonical name
STATION_ALIASES: dict[str, str] = {
    "london st pancras": "London St Pancras",
    "st pancras": "London St Pancras",
    "st pancras international": "London St Pancras",
    "london st pancras international": "London St Pancras",
    "london": "London St Pancras",
    "paris gare du nord": "Paris Gare du Nord",
    "paris nord": "Paris Gare du Nord",
    "gare du nord": "Paris Gare du Nord",
    "paris": "Paris Gare du Nord",
    "brussels midi": "Brussels Midi/Zuid",
    "brussels zuid": "Brussels Midi/Zuid",
    "bruxelles midi": "Brussels Midi/Zuid",
    "brussels": "Brussels Midi/Zuid",
    "amsterdam centraal": "Amsterdam Centraal",
    "amsterdam": "Amsterdam Centraal",
    "rotterdam centraal": "Rotterdam Centraal",
    "rotterdam": "Rotterdam Centraal",
    "lille europe": "Lille Europe",
    "lille": "Lille Europe",
    "ebbsfleet": "Ebbsfleet International",
    "ebbsfleet international": "Ebbsfleet International",
    "ashford": "Ashford International",
    "ashford international": "Ashford International",
    "calais": "Calais-Fréthun",
    "calais-fréthun": "Calais-Fréthun",
    "calais frethun": "Calais-Fréthun",
    "cologne": "Cologne Hbf",
    "koln": "Cologne Hbf",
}


def normalize_station(name: str) -> str:
    """Canonical name for a known alias; anything else comes back trimmed."""
    trimmed = name.strip()
    key = " ".join(trimmed.lower().split())
    return STATION_ALIASES.get(key, trimmed)


def station_display_name(code: str) -> str:
    return STATION_NAMES.get(code, code)
