from typing import Dict, List, Tuple, Union

KitEntry = Union[str, Tuple[str, int]]

ITEMS: Dict[str, str] = {
    "stone": "1",
    "grass": "2",
    "dirt": "3",
    "cobblestone": "4",
    "wooden plank": "5",
    "sapling": "6",
    "bedrock": "7",
    "water": "8",
    "lava": "10",
    "sand": "12",
    "gravel": "13",
    "gold ore": "14",
    "iron ore": "15",
    "coal ore": "16",
    "wood": "17",
    "leaves": "18",
    "sponge": "19",
    "glass": "20",
    "lapis lazuli ore": "21",
    "lapis lazuli block": "22",
    "dispenser": "23",
    "sandstone": "24",
    "note block": "25",
    "powered rail": "27",
    "detector rail": "28",
    "wool": "35",
    "dandelion": "37",
    "rose": "38",
    "brown mushroom": "39",
    "red mushroom": "40",
    "gold block": "41",
    "iron block": "42",
    "slab": "44",
    "brick": "45",
    "tnt": "46",
    "bookshelf": "47",
    "mossy cobblestone": "48",
    "obsidian": "49",
    "torch": "50",
    "chest": "54",
    "diamond ore": "56",
    "diamond block": "57",
    "crafting table": "58",
    "furnace": "61",
    "wooden door": "64",
    "ladder": "65",
    "rails": "66",
    "cobblestone stairs": "67",
    "lever": "69",
    "stone pressure plate": "70",
    "iron door": "71",
    "redstone ore": "73",
    "redstone torch": "76",
    "stone button": "77",
    "snow": "78",
    "ice": "79",
    "snow block": "80",
    "cactus": "81",
    "clay block": "82",
    "jukebox": "84",
    "fence": "85",
    "pumpkin": "86",
    "netherrack": "87",
    "soul sand": "88",
    "glowstone": "89",
    "jack o lantern": "91",
    "iron shovel": "256",
    "iron pickaxe": "257",
    "iron axe": "258",
    "flint and steel": "259",
    "apple": "260",
    "bow": "261",
    "arrow": "262",
    "coal": "263",
    "diamond": "264",
    "iron ingot": "265",
    "gold ingot": "266",
    "iron sword": "267",
    "wooden sword": "268",
    "stone sword": "272",
    "diamond sword": "276",
    "diamond shovel": "277",
    "diamond pickaxe": "278",
    "diamond axe": "279",
    "stick": "280",
    "bowl": "281",
    "mushroom soup": "282",
    "string": "287",
    "feather": "288",
    "gunpowder": "289",
    "diamond hoe": "293",
    "seeds": "295",
    "wheat": "296",
    "bread": "297",
    "diamond helmet": "310",
    "diamond chestplate": "311",
    "diamond leggings": "312",
    "diamond boots": "313",
    "flint": "318",
    "raw porkchop": "319",
    "cooked porkchop": "320",
    "painting": "321",
    "golden apple": "322",
    "sign": "323",
    "bucket": "325",
    "water bucket": "326",
    "lava bucket": "327",
    "minecart": "328",
    "saddle": "329",
    "redstone": "331",
    "snowball": "332",
    "boat": "333",
    "leather": "334",
    "milk": "335",
    "clay brick": "336",
    "clay": "337",
    "sugar cane": "338",
    "paper": "339",
    "book": "340",
    "slimeball": "341",
    "egg": "344",
    "compass": "345",
    "fishing rod": "346",
    "clock": "347",
    "glowstone dust": "348",
    "raw fish": "349",
    "cooked fish": "350",
    "dye": "351",
    "bone": "352",
    "sugar": "353",
    "cake": "354",
    "bed": "355",
    "redstone repeater": "356",
    "cookie": "357",
}

KITS: Dict[str, List[KitEntry]] = {
    "diamond": [
        "diamond sword",
        "diamond pickaxe",
        "diamond shovel",
        "diamond axe",
        ("torch", 64),
    ],
    "armour": [
        "diamond helmet",
        "diamond chestplate",
        "diamond leggings",
        "diamond boots",
    ],
    "ranged": [
        "bow",
        ("arrow", 320),
    ],
    "nether": [
        "flint and steel",
        ("obsidian", 14),
        ("torch", 32),
    ],
    "farm": [
        "diamond hoe",
        ("seeds", 64),
        ("water bucket", 2),
        ("bone", 32),
    ],
    "redstone": [
        ("redstone", 128),
        ("redstone torch", 32),
        ("redstone repeater", 16),
        ("lever", 8),
        ("stone button", 8),
    ],
}
