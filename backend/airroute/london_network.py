"""Built-in central London sample network.

Nodes A-X with coordinates; directed edges carry distance (km), travel time
(minutes), average AQI and street name. Two-way streets appear as two edges.
"""

from __future__ import annotations

from .road_graph import GraphEdge, GraphNode, RoadNetwork


def _n(node_id: str, name: str, lat: float, lng: float, address: str) -> GraphNode:
    return GraphNode(id=node_id, name=name, address=address, lat=lat, lng=lng)


def _e(u: str, v: str, distance_km: float, time_min: float, aqi: float, street: str) -> GraphEdge:
    return GraphEdge(
        from_node=u,
        to_node=v,
        distance_km=float(distance_km),
        travel_time_min=float(time_min),
        average_aqi=float(aqi),
        street_name=street,
    )


LONDON_NODES: tuple[GraphNode, ...] = (
    # Central
    _n("A", "City Center", 51.5074, -0.1278, "1 City Square"),
    _n("B", "Train Station", 51.5152, -0.0889, "Liverpool Street"),
    _n("C", "Shopping District", 51.5135, -0.1375, "Oxford Circus"),
    _n("D", "University Campus", 51.5246, -0.1340, "UCL Campus"),
    _n("E", "Hospital", 51.4994, -0.0999, "St Thomas Hospital"),
    _n("F", "Hyde Park", 51.5073, -0.1657, "Hyde Park Corner"),
    _n("G", "Business District", 51.5155, -0.0922, "Bank Station"),
    _n("H", "Stadium", 51.4869, -0.1063, "The Oval"),
    _n("I", "Museum Quarter", 51.4966, -0.1764, "Natural History Museum"),
    _n("J", "Riverside Walk", 51.5076, -0.0994, "South Bank"),
    # Northern green corridor
    _n("K", "Regents Park", 51.5313, -0.1570, "Regents Park"),
    _n("L", "Primrose Hill", 51.5396, -0.1615, "Primrose Hill"),
    _n("M", "Camden Gardens", 51.5390, -0.1426, "Camden Town"),
    _n("N", "Kings Cross Green", 51.5320, -0.1240, "Kings Cross"),
    # Southern green corridor
    _n("O", "Battersea Park", 51.4791, -0.1560, "Battersea Park"),
    _n("P", "Clapham Common", 51.4615, -0.1380, "Clapham Common"),
    _n("Q", "Brockwell Park", 51.4500, -0.1100, "Brockwell Park"),
    _n("R", "Dulwich Village", 51.4450, -0.0850, "Dulwich"),
    # Eastern industrial, fast but polluted
    _n("S", "Industrial Zone", 51.5100, -0.0600, "Canary Wharf"),
    _n("T", "Docklands", 51.5000, -0.0400, "Royal Docks"),
    _n("U", "Highway Junction", 51.4900, -0.0700, "A13 Junction"),
    # Western residential
    _n("V", "Kensington Gardens", 51.5069, -0.1795, "Kensington"),
    _n("W", "Notting Hill", 51.5139, -0.2050, "Notting Hill Gate"),
    _n("X", "Holland Park", 51.5028, -0.2040, "Holland Park"),
)

LONDON_EDGES: tuple[GraphEdge, ...] = (
    _e("A", "B", 2.8, 12, 95, "Cheapside"),
    _e("A", "C", 1.5, 8, 110, "Regent Street"),
    _e("A", "E", 1.2, 6, 85, "Westminster Bridge Rd"),
    _e("A", "J", 0.8, 4, 75, "Embankment"),
    _e("A", "G", 2.5, 15, 120, "Threadneedle St"),
    _e("B", "A", 2.8, 12, 95, "Cheapside"),
    _e("B", "G", 0.4, 3, 105, "Bishopsgate"),
    _e("B", "D", 3.2, 18, 88, "City Road"),
    _e("B", "S", 4.5, 20, 135, "Commercial Road"),
    _e("C", "A", 1.5, 8, 110, "Regent Street"),
    _e("C", "D", 1.8, 10, 92, "Tottenham Court Rd"),
    _e("C", "F", 1.2, 7, 65, "Park Lane"),
    _e("C", "K", 2.0, 12, 55, "Portland Place"),
    _e("D", "B", 3.2, 18, 88, "City Road"),
    _e("D", "C", 1.8, 10, 92, "Tottenham Court Rd"),
    _e("D", "K", 1.5, 8, 45, "Albany Street"),
    _e("D", "N", 1.0, 5, 52, "Euston Road"),
    _e("E", "A", 1.2, 6, 85, "Westminster Bridge Rd"),
    _e("E", "H", 2.0, 10, 78, "Kennington Road"),
    _e("E", "J", 0.5, 3, 60, "South Bank"),
    _e("F", "C", 1.2, 7, 65, "Park Lane"),
    _e("F", "I", 1.5, 8, 35, "Kensington Road"),
    _e("F", "V", 0.8, 5, 30, "Kensington Gardens"),
    _e("F", "K", 2.5, 15, 40, "Park Connector"),
    _e("G", "A", 2.5, 15, 120, "Threadneedle St"),
    _e("G", "B", 0.4, 3, 105, "Bishopsgate"),
    _e("G", "S", 5.0, 22, 145, "A1261"),
    _e("G", "J", 1.8, 9, 90, "London Bridge"),
    _e("H", "E", 2.0, 10, 78, "Kennington Road"),
    _e("H", "O", 3.5, 18, 42, "Battersea Bridge Rd"),
    _e("H", "P", 2.8, 14, 38, "Clapham Road"),
    _e("I", "F", 1.5, 8, 35, "Kensington Road"),
    _e("I", "V", 0.6, 4, 32, "Exhibition Road"),
    _e("I", "X", 1.8, 10, 38, "Holland Walk"),
    _e("J", "A", 0.8, 4, 75, "Embankment"),
    _e("J", "E", 0.5, 3, 60, "South Bank"),
    _e("J", "G", 1.8, 9, 90, "London Bridge"),
    _e("K", "C", 2.0, 12, 55, "Portland Place"),
    _e("K", "D", 1.5, 8, 45, "Albany Street"),
    _e("K", "F", 2.5, 15, 40, "Park Connector"),
    _e("K", "L", 1.2, 7, 28, "Primrose Hill Road"),
    _e("K", "M", 1.5, 9, 35, "Parkway"),
    _e("L", "K", 1.2, 7, 28, "Primrose Hill Road"),
    _e("L", "M", 1.0, 6, 25, "Regent's Park Road"),
    _e("L", "W", 3.5, 20, 42, "Prince Albert Road"),
    _e("M", "K", 1.5, 9, 35, "Parkway"),
    _e("M", "L", 1.0, 6, 25, "Regent's Park Road"),
    _e("M", "N", 1.8, 10, 48, "Camden Road"),
    _e("N", "D", 1.0, 5, 52, "Euston Road"),
    _e("N", "M", 1.8, 10, 48, "Camden Road"),
    _e("N", "B", 2.5, 14, 82, "Pentonville Road"),
    _e("O", "H", 3.5, 18, 42, "Battersea Bridge Rd"),
    _e("O", "P", 2.2, 12, 32, "Battersea Park Road"),
    _e("O", "I", 3.0, 16, 38, "Chelsea Bridge Road"),
    _e("P", "H", 2.8, 14, 38, "Clapham Road"),
    _e("P", "O", 2.2, 12, 32, "Battersea Park Road"),
    _e("P", "Q", 2.5, 14, 28, "Brixton Hill"),
    _e("Q", "P", 2.5, 14, 28, "Brixton Hill"),
    _e("Q", "R", 2.0, 11, 25, "Dulwich Road"),
    _e("Q", "U", 4.5, 22, 95, "A2"),
    _e("R", "Q", 2.0, 11, 25, "Dulwich Road"),
    _e("R", "U", 3.8, 18, 88, "A205"),
    _e("S", "B", 4.5, 20, 135, "Commercial Road"),
    _e("S", "G", 5.0, 22, 145, "A1261"),
    _e("S", "T", 2.5, 8, 160, "Aspen Way"),
    _e("S", "U", 3.0, 10, 150, "A1020"),
    _e("T", "S", 2.5, 8, 160, "Aspen Way"),
    _e("T", "U", 2.0, 7, 155, "Royal Albert Way"),
    _e("U", "S", 3.0, 10, 150, "A1020"),
    _e("U", "T", 2.0, 7, 155, "Royal Albert Way"),
    _e("U", "Q", 4.5, 22, 95, "A2"),
    _e("U", "R", 3.8, 18, 88, "A205"),
    _e("U", "E", 5.5, 25, 110, "Old Kent Road"),
    _e("V", "F", 0.8, 5, 30, "Kensington Gardens"),
    _e("V", "I", 0.6, 4, 32, "Exhibition Road"),
    _e("V", "W", 2.0, 12, 38, "Kensington Church St"),
    _e("V", "X", 1.2, 7, 35, "Kensington High St"),
    _e("W", "V", 2.0, 12, 38, "Kensington Church St"),
    _e("W", "L", 3.5, 20, 42, "Prince Albert Road"),
    _e("W", "X", 1.5, 8, 36, "Holland Park Ave"),
    _e("X", "I", 1.8, 10, 38, "Holland Walk"),
    _e("X", "V", 1.2, 7, 35, "Kensington High St"),
    _e("X", "W", 1.5, 8, 36, "Holland Park Ave"),
    _e("X", "O", 4.0, 22, 45, "Fulham Road"),
)


def default_network() -> RoadNetwork:
    return RoadNetwork(nodes={node.id: node for node in LONDON_NODES}, source="builtin:london")


def default_edges() -> tuple[GraphEdge, ...]:
    return LONDON_EDGES
