ADJECTIVES: tuple[str, ...] = (
    "adamant", "adroit", "amatory", "animistic", "antic", "arcadian",
    "baleful", "bellicose", "bilious", "boorish", "calamitous", "caustic",
    "cerulean", "comely", "concomitant", "contumacious", "corpulent",
    "crapulous", "defamatory", "didactic", "dilatory", "dowdy", "efficacious",
    "effulgent", "egregious", "endemic", "equanimous", "execrable", "fastidious",
    "feckless", "fecund", "friable", "fulsome", "garrulous", "guileless",
    "gustatory", "heuristic", "histrionic", "hubristic", "incendiary",
    "insidious", "insolent", "intransigent", "inveterate", "invidious",
    "irksome", "jejune", "jocular", "judicious", "lachrymose", "limpid",
    "loquacious", "luminous", "mannered", "mendacious", "meretricious",
    "minatory", "mordant", "munificent", "nefarious", "noxious", "obtuse",
    "parsimonious", "pendulous", "pernicious", "pervasive", "petulant",
    "platitudinous", "precipitate", "propitious", "puckish", "querulous",
    "quiescent", "rebarbative", "recalcitrant", "redolent", "rhadamanthine",
    "risible", "ruminative", "sagacious", "salubrious", "sartorial",
    "sclerotic", "serpentine", "spasmodic", "strident", "taciturn",
    "tenacious", "tremulous", "trenchant", "turbulent", "turgid", "ubiquitous",
    "uxorious", "verdant", "voluble", "voracious", "wheedling", "withering",
    "zealous",
)

NOUNS: tuple[str, ...] = (
    "albatross", "alligator", "anemone", "angelfish", "anteater", "armadillo",
    "axolotl", "barnacle", "barracuda", "beluga", "bison", "bittern",
    "caracal", "cassowary", "chameleon", "chinchilla", "cormorant",
    "coyote", "crayfish", "cuttlefish", "dolphin", "dormouse", "dugong",
    "egret", "falcon", "ferret", "flamingo", "gazelle", "gecko", "gibbon",
    "grouse", "hedgehog", "heron", "hornbill", "ibex", "iguana", "impala",
    "jackal", "jaguar", "jellyfish", "kestrel", "kingfisher", "koala",
    "lemming", "lemur", "lobster", "lynx", "manatee", "mandrill", "marmot",
    "meerkat", "mongoose", "narwhal", "nautilus", "newt", "ocelot", "octopus",
    "okapi", "orca", "ostrich", "otter", "pangolin", "pelican", "penguin",
    "platypus", "porcupine", "puffin", "quail", "quokka", "raccoon", "raven",
    "salamander", "scorpion", "seahorse", "shrimp", "sloth", "starfish",
    "stingray", "swordfish", "tapir", "tarantula", "tortoise", "toucan",
    "urchin", "vicuna", "vole", "vulture", "walrus", "wallaby", "warthog",
    "weasel", "wolverine", "wombat", "yak", "zebra",
)
