"""Static tag vocabularies: defaults, core diet terms and ingredient synonyms."""

from __future__ import annotations

DEFAULT_TAGS: list[str] = [
    "glutenfree",
    "vegan",
    "vegetarian",
    "halal",
    "kosher",
]

CORE_HARD_TAGS: frozenset[str] = frozenset({"vegan", "vegetarian", "glutenfree"})

_MEAT_AND_SEAFOOD_TERMS: list[str] = [
    "chicken", "beef", "pork", "lamb", "duck", "turkey", "bacon", "ham",
    "sausage", "fish", "tuna", "salmon", "shrimp", "crab", "lobster",
    "oyster", "clam", "mussel", "scallop",
]

NON_VEGETARIAN_TERMS: list[str] = list(_MEAT_AND_SEAFOOD_TERMS)

NON_VEGAN_TERMS: list[str] = _MEAT_AND_SEAFOOD_TERMS + [
    "egg", "milk", "cheese", "butter", "cream", "yogurt", "honey",
]

GLUTEN_TERMS: list[str] = [
    "bread", "bun", "pasta", "noodle", "dumpling", "flour", "tortilla",
    "batter", "wheat", "breadcrumbs", "soy sauce",
]

# Substrings in the item text that waive the matching core rule
VEGAN_INDICATORS: tuple[str, ...] = ("vegan", "plant-based")
VEGETARIAN_INDICATORS: tuple[str, ...] = ("vegetarian", "vegan")
GLUTEN_FREE_INDICATORS: tuple[str, ...] = ("gf", "gluten-free", "gluten free")

# Negative key → terms searched for in menu text. Unknown keys match themselves.
INGREDIENT_SYNONYMS: dict[str, list[str]] = {
    "dairy": [
        "milk", "cheese", "butter", "cream", "yogurt", "yoghurt", "ghee",
        "paneer", "mozzarella", "parmesan", "cheddar", "ricotta",
        "mascarpone", "custard", "ice cream", "whey",
    ],
    "milk": ["milk", "latte", "cappuccino", "milkshake"],
    "cheese": [
        "cheese", "mozzarella", "parmesan", "cheddar", "ricotta", "feta",
        "brie", "gouda", "paneer",
    ],
    "egg": ["egg", "eggs", "omelette", "omelet", "mayo", "mayonnaise", "aioli"],
    "eggs": ["egg", "eggs", "omelette", "omelet", "mayo", "mayonnaise", "aioli"],
    "gluten": [
        "bread", "bun", "pasta", "noodle", "noodles", "dumpling", "dumplings",
        "flour", "tortilla", "batter", "wheat", "breadcrumbs", "soy sauce",
        "seitan",
    ],
    "nut": [
        "nut", "nuts", "peanut", "peanuts", "almond", "almonds", "cashew",
        "cashews", "walnut", "walnuts", "pecan", "pistachio", "hazelnut",
    ],
    "nuts": [
        "nut", "nuts", "peanut", "peanuts", "almond", "almonds", "cashew",
        "cashews", "walnut", "walnuts", "pecan", "pistachio", "hazelnut",
    ],
    "peanut": ["peanut", "peanuts", "satay"],
    "shellfish": [
        "shrimp", "prawn", "prawns", "crab", "lobster", "oyster", "oysters",
        "clam", "clams", "mussel", "mussels", "scallop", "scallops",
    ],
    "seafood": [
        "fish", "tuna", "salmon", "cod", "shrimp", "prawn", "crab", "lobster",
        "oyster", "clam", "mussel", "scallop", "squid", "calamari", "octopus",
    ],
    "fish": ["fish", "tuna", "salmon", "cod", "tilapia", "anchovy", "anchovies"],
    "pork": ["pork", "bacon", "ham", "sausage", "prosciutto", "chorizo", "lard"],
    "beef": ["beef", "steak", "brisket", "veal"],
    "chicken": ["chicken", "wings"],
    "meat": [
        "chicken", "beef", "pork", "lamb", "duck", "turkey", "bacon", "ham",
        "sausage", "steak", "veal",
    ],
    "soy": ["soy", "soya", "tofu", "edamame", "tempeh", "miso"],
    "mushroom": ["mushroom", "mushrooms", "shiitake", "portobello", "truffle"],
    "onion": ["onion", "onions", "scallion", "scallions", "shallot", "shallots"],
    "garlic": ["garlic", "aioli"],
    "spicy": ["spicy", "chili", "chilli", "jalapeno", "sriracha"],
    "alcohol": ["beer", "wine", "sake", "vodka", "rum", "whiskey", "cocktail"],
    "sesame": ["sesame", "tahini"],
    "sugar": ["sugar", "syrup", "caramel", "honey"],
}

# Profile dining style (lower-cased) → tag
DINING_STYLE_TAGS: dict[str, str] = {
    "vegan": "vegan",
    "vegetarian": "vegetarian",
    "gluten-free": "glutenfree",
    "gluten free": "glutenfree",
    "glutenfree": "glutenfree",
    "halal": "halal",
    "kosher": "kosher",
    "dairy-free": "no-dairy",
    "dairy free": "no-dairy",
    "nut-free": "no-nuts",
    "nut free": "no-nuts",
    "shellfish-free": "no-shellfish",
    "shellfish free": "no-shellfish",
    "pescatarian": "pescatarian",
    "keto": "keto",
    "low-carb": "lowcarb",
    "low carb": "lowcarb",
    "spicy": "spicy",
}
