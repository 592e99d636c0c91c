"""Greek text normalisation used when lemmas are printed and sorted."""

# Oxia-accented letters (Greek Extended block) -> tonos forms (Greek and Coptic
# block), plus the Greek question mark and ano teleia -> their ASCII/Latin-1
# counterparts.
GREEK_CANONICAL = [
    ("\u1F71", "\u03AC"),  # alpha
    ("\u1FBB", "\u0386"),
    ("\u1F73", "\u03AD"),  # epsilon
    ("\u1FC9", "\u0388"),
    ("\u1F75", "\u03AE"),  # eta
    ("\u1FCB", "\u0389"),
    ("\u1F77", "\u03AF"),  # iota
    ("\u1FDB", "\u038A"),
    ("\u1F79", "\u03CC"),  # omicron
    ("\u1FF9", "\u038C"),
    ("\u1F7B", "\u03CD"),  # upsilon
    ("\u1FEB", "\u038E"),
    ("\u1F7D", "\u03CE"),  # omega
    ("\u1FFB", "\u038F"),
    ("\u1FD3", "\u0390"),  # iota + diaeresis + acute
    ("\u1FE3", "\u03B0"),  # upsilon + diaeresis + acute
    ("\u037E", ";"),        # question mark -> semicolon
    ("\u0387", "\u00B7"),  # ano teleia -> middle dot
    ("\u0344", "\u0308\u0301"),
]


def sanitize_greek(s: str) -> str:
    """Replace oxia code points with their tonos equivalents."""
    for old, new in GREEK_CANONICAL:
        s = s.replace(old, new)
    return s


def fold_sort_key(sort_key: str) -> str:
    """Case-folded form of a gloss sort key; the only ordering key we use."""
    return sort_key.casefold()
