USER_AGENT = "nearby-markers-map/0.1"
TIMEOUT = 10

MARKERS_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/json",
}
IP_LOCATION_HEADERS = {
    "User-Agent": USER_AGENT,
}
