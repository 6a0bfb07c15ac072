__all__ = [
    "MISSING_REF",
    "NON_REF_SYMBOLIC_ALLELE_BASES",
    "INFORMATIVE_THRESHOLD",
    "LOG10_QUAL_PER_BASE",
    "MAX_ERRORS_PER_READ",
]

# Index meaning "no reference allele present"
MISSING_REF = -1

NON_REF_SYMBOLIC_ALLELE_BASES = "<NON_REF>"

# Minimum difference between the best and second-best allele likelihoods for a read to count as informative
INFORMATIVE_THRESHOLD = 0.2

# Quality filtering: log10 likelihood penalty per tolerated base error, and the cap on the number of such errors
LOG10_QUAL_PER_BASE = -4.0
MAX_ERRORS_PER_READ = 2.0
