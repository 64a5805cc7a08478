FREESTYLE = "自由形"
BACKSTROKE = "背泳ぎ"
BREASTSTROKE = "平泳ぎ"
BUTTERFLY = "バタフライ"
INDIVIDUAL_MEDLEY = "個人メドレー"

SWIM_STYLES = (FREESTYLE, BACKSTROKE, BREASTSTROKE, BUTTERFLY, INDIVIDUAL_MEDLEY)

POOL_LENGTHS = (15, 25, 50)

ALLOWED_DISTANCES = {
    15: (15, 30, 60, 90, 120, 240),
    25: (25, 50, 100, 200, 400, 800, 1500),
    50: (50, 100, 200, 400, 800, 1500),
}

GENDERS = ("male", "female")

ROLES = ("coach", "student", "admin")
COACH_ROLES = ("coach", "admin")

COMPETITION_LEVELS = ("regional", "prefectural", "national", "international")

# IM rankings are only kept for the 15m pool, 60m and 120m events
IM_POOL_LENGTH = 15
IM_DISTANCES = (60, 120)


def distances_for_pool(pool_length) -> tuple:
    return ALLOWED_DISTANCES.get(pool_length, ())


def is_allowed_distance(pool_length, distance) -> bool:
    return distance in distances_for_pool(pool_length)
