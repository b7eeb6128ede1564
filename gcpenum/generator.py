"""
Candidate bucket name generation.
"""

PERMUTATIONS = (
    "{keyword}-{suffix}",
    "{suffix}-{keyword}",
    "{keyword}_{suffix}",
    "{suffix}_{keyword}",
    "{keyword}{suffix}",
    "{suffix}{keyword}",
)

TLD_SUFFIXES = (".com", ".net", ".org")


def generate(keyword: str, suffixes) -> list:
    """Expand one keyword over every suffix, first occurrence wins."""
    candidates = []
    for suffix in suffixes:
        for template in PERMUTATIONS:
            candidates.append(template.format(keyword=keyword, suffix=suffix))

    candidates.append(keyword)
    candidates.extend(keyword + tld for tld in TLD_SUFFIXES)
    return list(dict.fromkeys(candidates))


def generate_all(keywords, suffixes) -> list:
    # Each keyword is deduplicated on its own; the results are only concatenated.
    buckets = []
    for keyword in keywords:
        buckets.extend(generate(keyword, suffixes))
    return buckets
