"""
Transaction pattern definitions for the ledger classification engine.
Patterns for US consumer banking data delivered by the aggregation feed.

Contains the static detection tables for:
- Income detection (ordered regex table, first match wins)
- Spending categories (merchant substring table)
- Credit card payment phrases
- Transfer-looking keywords (used for statistics only)

All tables are immutable; they are loaded once at import time.
"""

from types import MappingProxyType

# Income Patterns (Credits - positive amounts)
# Ordered (regex, label) pairs. Order matters: the first match wins.
INCOME_PATTERNS = (
    # Payroll
    (r"payroll", "Payroll"),
    (r"direct\s*dep(osit)?", "Direct Deposit"),
    (r"salary", "Salary"),
    (r"wages?", "Wages"),
    (r"pay\s*check", "Paycheck"),
    (r"ach\s*credit.*payroll", "ACH Payroll"),

    # Employer
    (r"employer\s*(payment|deposit)", "Employer Payment"),
    (r"compensation", "Compensation"),

    # Deposits
    (r"ach\s*credit", "ACH Credit"),
    (r"wire\s*transfer\s*(in|credit|deposit)", "Wire Transfer"),
    (r"direct\s*deposit", "Direct Deposit"),

    # Government & benefits
    (r"ssa\s*(treas|payment)", "Social Security"),
    (r"social\s*security", "Social Security"),
    (r"ssi\s*(payment|deposit)", "SSI Payment"),
    (r"irs\s*(treas|refund)", "IRS Refund"),
    (r"tax\s*refund", "Tax Refund"),
    (r"unemployment", "Unemployment"),
    (r"disability\s*(payment|benefit)", "Disability"),

    # Investment income
    (r"dividend", "Dividend"),
    (r"interest\s*(payment|credit)", "Interest"),

    # Other income
    (r"refund", "Refund"),
    (r"rebate", "Rebate"),
    (r"reimbursement", "Reimbursement"),
    (r"cashback", "Cashback"),
    (r"bonus", "Bonus"),
)


# Spending Categories (Debits - negative amounts)
# Category name -> merchant substrings (lower case). Iterated in declared order.
CATEGORY_PATTERNS = MappingProxyType({
    "Dining": (
        "mcdonald", "mcdonalds", "burger king", "wendy's", "wendys",
        "taco bell", "chipotle", "subway", "panera", "chick-fil-a",
        "starbucks", "dunkin", "panda express", "five guys", "in-n-out",
        "olive garden", "applebee", "chili's", "outback", "red lobster",
        "cheesecake factory", "ihop", "denny", "waffle house",
        "domino", "pizza hut", "papa john", "little caesar",
        "doordash", "uber eats", "grubhub", "postmates", "seamless",
        "restaurant", "cafe", "bistro", "grill", "diner", "eatery",
        "tavern", "steakhouse", "sushi", "thai", "chinese", "mexican",
        "italian", "indian", "korean", "japanese", "vietnamese", "greek",
    ),

    "Groceries": (
        "whole foods", "trader joe", "safeway", "kroger", "publix",
        "albertson", "vons", "ralph's", "ralphs", "giant", "shoprite",
        "stop & shop", "food lion", "harris teeter", "h-e-b", "heb",
        "aldi", "lidl", "wegman", "costco", "sam's club", "bj's",
        "sprouts", "natural grocers", "fresh market", "grocery outlet",
        "food 4 less", "food4less", "winco", "meijer", "piggly wiggly",
        "grocery", "supermarket", "market basket", "hannaford",
    ),

    "Shopping": (
        "amazon", "walmart", "target", "best buy", "costco",
        "home depot", "lowe's", "lowes", "ikea", "bed bath",
        "kohls", "kohl's", "macy's", "macys", "nordstrom", "jcpenney",
        "ross", "tjmaxx", "tj maxx", "marshalls", "burlington",
        "old navy", "gap", "banana republic", "h&m", "zara", "forever 21",
        "foot locker", "nike", "adidas", "dick's sporting",
        "bath & body", "sephora", "ulta", "cvs", "walgreens", "rite aid",
        "dollar tree", "dollar general", "five below", "big lots",
        "michaels", "hobby lobby", "joann", "craft", "office depot",
        "staples", "apple store", "microsoft store", "gamestop",
        "wayfair", "overstock", "pier 1", "crate & barrel", "pottery barn",
    ),

    "Transportation": (
        "shell", "chevron", "exxon", "mobil", "bp", "arco",
        "76", "valero", "marathon", "speedway", "wawa", "sheetz",
        "quiktrip", "kwik trip", "racetrac", "circle k", "pilot",
        "loves", "love's", "flying j", "ta travel",
        "uber trip", "uber *trip", "lyft", "taxi", "cab",
        "dmv", "toll", "parking", "garage",
        "jiffy lube", "firestone", "midas", "pep boys", "autozone",
        "o'reilly", "napa auto", "advance auto", "carwash",
        "enterprise", "hertz", "avis", "budget rent", "national rent",
    ),

    "Bills & Utilities": (
        "electric", "power", "energy", "water", "sewer", "gas company",
        "pg&e", "pge", "con edison", "coned", "duke energy", "dominion",
        "xcel", "national grid", "entergy", "aep", "dte energy",
        "at&t", "verizon", "t-mobile", "tmobile", "sprint", "comcast",
        "xfinity", "spectrum", "cox", "frontier", "centurylink",
        "optimum", "dish", "directv", "internet", "cable", "phone bill",
        "waste management", "republic services", "garbage", "trash",
        "homeowner", "hoa", "condo association",
    ),

    "Entertainment": (
        "netflix", "hulu", "disney+", "disney plus", "hbo", "max",
        "amazon prime", "apple tv", "peacock", "paramount+", "paramount plus",
        "spotify", "apple music", "pandora", "tidal", "youtube premium",
        "audible", "kindle unlimited", "playstation", "xbox", "nintendo",
        "steam", "epic games", "twitch", "patreon",
        "amc", "regal", "cinemark", "movie theater", "cinema",
        "bowling", "arcade", "dave & buster", "escape room",
        "museum", "zoo", "aquarium", "theme park", "amusement",
        "concert", "ticketmaster", "stubhub", "vivid seats", "eventbrite",
    ),

    "Health & Fitness": (
        "gym", "fitness", "planet fitness", "la fitness", "24 hour fitness",
        "equinox", "orangetheory", "crossfit", "peloton", "soulcycle",
        "yoga", "pilates", "martial arts",
        "pharmacy", "cvs", "walgreens", "rite aid", "prescription",
        "doctor", "physician", "dentist", "orthodontist", "optometrist",
        "hospital", "clinic", "urgent care", "lab", "labcorp", "quest",
        "therapist", "chiropractor", "physical therapy", "massage",
        "vitamin", "gnc", "supplement", "wellness",
    ),

    "Travel": (
        "airline", "delta", "united", "american airlines", "southwest",
        "jetblue", "spirit", "frontier", "alaska air",
        "hotel", "marriott", "hilton", "hyatt", "ihg", "wyndham",
        "best western", "holiday inn", "hampton inn", "courtyard",
        "airbnb", "vrbo", "booking.com", "expedia", "kayak", "orbitz",
        "priceline", "hotels.com", "tripadvisor", "travelocity",
        "tsa", "airport", "amtrak", "greyhound", "cruise",
    ),

    "Subscriptions": (
        "subscription", "monthly", "annual",
        "netflix", "spotify", "hulu", "disney+", "hbo", "apple music",
        "adobe", "microsoft 365", "office 365", "google one", "icloud",
        "dropbox", "evernote", "notion", "slack", "zoom",
        "linkedin premium", "dating app", "tinder", "bumble", "hinge",
        "newspaper", "new york times", "washington post", "wall street journal",
        "magazine", "membership",
    ),

    "Personal Care": (
        "salon", "barber", "hair", "spa", "massage", "nail",
        "manicure", "pedicure", "waxing", "facial", "skincare",
        "sephora", "ulta", "beauty", "cosmetic", "makeup",
    ),

    "Education": (
        "tuition", "college", "university", "school", "course",
        "udemy", "coursera", "linkedin learning", "skillshare",
        "masterclass", "brilliant", "book", "textbook", "tutoring",
        "student loan", "education",
    ),

    "Insurance": (
        "geico", "progressive", "state farm", "allstate", "liberty mutual",
        "farmers", "usaa", "nationwide", "travelers", "amica",
        "insurance", "premium", "coverage",
    ),

    "Pets": (
        "petco", "petsmart", "pet supplies plus", "chewy",
        "veterinary", "vet", "animal hospital", "pet",
        "dog", "cat", "grooming",
    ),
})


# Credit card payment phrases (plain substring, no regex)
CC_PAYMENT_PATTERNS = (
    "credit card payment",
    "cc payment",
    "card payment",
    "payment to card",
    "autopay payment",
    "minimum payment",
    "statement balance",
)


# Keywords that make a transaction look like an internal transfer
TRANSFER_KEYWORDS = (
    "transfer",
    "xfer",
    "tfr",
    "move money",
    "internal",
    "between accounts",
)
