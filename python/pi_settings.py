import math

# Common settings shared by the status generator and the estimation run
REPLICATES = 10
DIMENSION = 3
POINTS = 10_000_000
SIZE = POINTS * DIMENSION  # draws consumed by one replicate

# seed with equal number of 0 and 1 bits (MT19937 hashes it through SeedSequence)
SEED = 0b10101010101010101010101010101010

STATUS_DIR = "status"
CHUNK_POINTS = 1_000_000
GENERATOR = "mt19937"

TRUE_VALUE = 4.0 * math.pi / 3.0  # volume of the sphere of radius 1
