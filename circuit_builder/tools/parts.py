"""
Parts tools — catalog search, datasheet lookup and vendor cart links.

The catalog is a static in-memory table; nothing is scraped or stored.
Search tokenizes the query the same way for every entry and ranks by how
many tokens hit an entry's name, category or keywords.
"""
import re
from dataclasses import asdict
from typing import Any, Literal, Optional
from urllib.parse import quote

from pydantic import BaseModel, Field

from circuit_builder.config import CONFIG
from circuit_builder.tools.dispatcher import ToolCall, parse_arguments, resolve_call_schema
from circuit_builder.types import BOMItem, CartLink, CatalogEntry

URI_SAFE = "-_.!~*'()"

STOP_WORDS = {'or', 'and', 'the', 'a', 'an', 'for', 'with', 'not', 'of', 'to', 'in', 'is', 'on', 'by'}

CATALOG = [
    CatalogEntry("Arduino Uno R3", "microcontroller", "A000066", "5V",
                 ["arduino", "uno", "atmega328p", "board"], "https://www.adafruit.com/product/50"),
    CatalogEntry("Arduino Nano", "microcontroller", "A000005", "5V",
                 ["arduino", "nano", "atmega328p", "board"], "https://store.arduino.cc/products/arduino-nano"),
    CatalogEntry("ESP32 DevKitC", "microcontroller", "ESP32-DEVKITC-32E", "3.3V",
                 ["esp32", "wifi", "bluetooth", "board"], "https://www.adafruit.com/product/3269"),
    CatalogEntry("220 Ohm Resistor", "passive", "CF14JT220R", "",
                 ["resistor", "220", "ohm", "current", "limiting"], "https://www.adafruit.com/product/2780"),
    CatalogEntry("10k Ohm Resistor", "passive", "CF14JT10K0", "",
                 ["resistor", "10k", "ohm", "pullup", "pulldown"], "https://www.adafruit.com/product/2784"),
    CatalogEntry("100uF Electrolytic Capacitor", "passive", "UVR1C101MDD", "16V",
                 ["capacitor", "electrolytic", "100uf", "decoupling"], "https://www.adafruit.com/product/2193"),
    CatalogEntry("5mm Red LED", "indicator", "C503B-RCN", "2V",
                 ["led", "red", "indicator", "light"], "https://www.adafruit.com/product/300"),
    CatalogEntry("DHT11 Temperature & Humidity Sensor", "sensor", "DHT11", "3-5V",
                 ["dht11", "temperature", "humidity", "sensor"], "https://www.adafruit.com/product/386"),
    CatalogEntry("HC-SR04 Ultrasonic Sensor", "sensor", "HC-SR04", "5V",
                 ["hc-sr04", "ultrasonic", "distance", "sensor", "sonar"], "https://www.adafruit.com/product/3942"),
    CatalogEntry("PIR Motion Sensor", "sensor", "HC-SR501", "5V",
                 ["pir", "motion", "sensor", "infrared"], "https://www.adafruit.com/product/189"),
    CatalogEntry("Photoresistor (LDR)", "sensor", "GL5528", "",
                 ["ldr", "photoresistor", "light", "sensor"], "https://www.adafruit.com/product/161"),
    CatalogEntry("SG90 Micro Servo", "actuator", "SG90", "4.8V",
                 ["sg90", "servo", "motor", "micro"], "https://www.adafruit.com/product/169"),
    CatalogEntry("L298N Motor Driver", "actuator", "L298N", "5-35V",
                 ["l298n", "motor", "driver", "dc", "h-bridge"], "https://www.adafruit.com/search?q=L298N"),
    CatalogEntry("LM7805 Voltage Regulator", "power", "LM7805", "7-35V in, 5V out",
                 ["lm7805", "regulator", "linear", "5v", "power"], "https://www.adafruit.com/product/2164"),
    CatalogEntry("Half-size Breadboard", "prototyping", "", "",
                 ["breadboard", "prototyping", "solderless"], "https://www.adafruit.com/product/64"),
]

DATASHEETS = {
    "arduino uno": {
        "pdf_link": "https://docs.arduino.cc/resources/datasheets/A000066-datasheet.pdf",
        "specs": {"voltage": "7-12V Recommended", "current": "50mA per I/O pin", "architecture": "AVR ATmega328P"},
    },
    "lm7805": {
        "pdf_link": "https://www.ti.com/lit/ds/symlink/lm340.pdf",
        "specs": {"voltage": "Input up to 35V, output 5V", "current": "1.5A", "pinout": "In, Gnd, Out"},
    },
    "hc-sr04": {
        "pdf_link": "https://cdn.sparkfun.com/datasheets/Sensors/Proximity/HCSR04.pdf",
        "specs": {"voltage": "5V DC", "current": "15mA", "range": "2cm to 400cm"},
    },
    "dht11": {
        "pdf_link": "https://www.mouser.com/datasheet/2/758/DHT11-Technical-Data-Sheet-Translated-Version-1143054.pdf",
        "specs": {"voltage": "3-5V", "humidity": "20-90%", "temperature": "0-50°C"},
    },
    "sg90": {
        "pdf_link": "http://www.ee.ic.ac.uk/pjs99/projects/servo/SG90%20Datasheet.pdf",
        "specs": {"voltage": "4.8V", "speed": "0.1s/60°", "torque": "1.8kg/cm"},
    },
}


def tokenize(query: str) -> list[str]:
    """Clean search tokens from a free-text component description.

    Drops parenthetical notes, punctuation other than hyphens, stop words and
    single characters.
    """
    clean = re.sub(r'\([^)]*\)', '', query)
    clean = re.sub(r'[^\w\s-]', ' ', clean)
    return [w for w in clean.lower().split() if w not in STOP_WORDS and len(w) > 1]


def _score(entry: CatalogEntry, tokens: list[str]) -> int:
    haystack = " ".join([entry.name.lower(), entry.category, entry.mpn.lower(), *entry.keywords])
    return sum(1 for t in tokens if t in haystack)


def search_catalog(query: str, limit: int = 10) -> list[CatalogEntry]:
    tokens = tokenize(query)
    if not tokens:
        return []
    scored = [(_score(e, tokens), i, e) for i, e in enumerate(CATALOG)]
    hits = sorted((s for s in scored if s[0] > 0), key=lambda s: (-s[0], s[1]))
    return [e for _, _, e in hits[:limit]]


class SearchComponentsParams(BaseModel):
    query: str = Field(..., description="Component name or category to search for")
    limit: int = Field(10, gt=0, le=50, description="Maximum number of results")


class SearchComponentsTool:
    name = "search_components"
    description = "Search for Arduino-compatible components, modules, and sensors."
    Params = SearchComponentsParams
    read_only = True
    open_world = False

    async def handle(self, call: ToolCall) -> dict:
        params = parse_arguments(self.Params, call)
        results = search_catalog(params.query, params.limit)
        return {
            "query": params.query,
            "tokens": tokenize(params.query),
            "results": [asdict(e) for e in results],
        }


class GetDatasheetParams(BaseModel):
    component_name: Optional[str] = Field(None, description="Human-friendly component name")
    part_number: Optional[str] = Field(None, description="Manufacturer part number")


class GetDatasheetTool:
    name = "get_datasheet"
    description = "Get a component datasheet link and summarize key electrical specs."
    Params = GetDatasheetParams
    read_only = True
    open_world = True

    async def handle(self, call: ToolCall) -> dict:
        params = parse_arguments(self.Params, call)
        query = (params.component_name or params.part_number or "").lower()
        key = next((k for k in DATASHEETS if k in query), None)
        if key:
            entry = DATASHEETS[key]
        else:
            entry = {
                "pdf_link": f"https://www.google.com/search?q={quote(query + ' datasheet pdf', safe=URI_SAFE)}",
                "specs": {"note": "Generic search result generated. No exact match found in local DB."},
            }
        return {
            "component": params.component_name or params.part_number or "Generic Search",
            "pdf_link": entry["pdf_link"],
            "key_specs_summary": entry["specs"],
        }


class BOMEntry(BaseModel):
    name: str = Field(..., description="Component name")
    quantity: int = Field(..., gt=0, description="Requested quantity")
    part_number: Optional[str] = Field(None, description="Manufacturer part number if known")


class OrderPartsParams(BaseModel):
    bom_list: list[BOMEntry] = Field(default_factory=list, description="Bill of materials entries")
    circuit_schema: Optional[Any] = Field(None, description="Optional normalized circuit schema")
    preferred_vendor: Literal["mouser", "digikey", "either"] = Field("either", description="Preferred purchasing vendor")


def cart_links(bom: list[BOMItem], preferred_vendor: str = "either") -> list[CartLink]:
    query = quote(" ".join(item.query_term for item in bom), safe=URI_SAFE)
    links = [
        CartLink("mouser", f"https://www.mouser.com/c/?q={query}"),
        CartLink("digikey", f"https://www.digikey.com/en/products/result?s={query}"),
    ]
    return [l for l in links if preferred_vendor == "either" or l.vendor == preferred_vendor]


class OrderPartsTool:
    name = "order_parts"
    description = "Create vendor cart links from BOM data or a normalized circuit schema."
    Params = OrderPartsParams
    read_only = True
    open_world = True

    async def handle(self, call: ToolCall) -> dict:
        params = parse_arguments(self.Params, call)
        if params.bom_list:
            bom = [BOMItem(b.name, b.quantity, b.part_number) for b in params.bom_list]
        else:
            schema = resolve_call_schema(call, params.circuit_schema)
            bom = [BOMItem(p.name, p.quantity, p.mpn) for p in schema.parts]

        total = sum(item.quantity * CONFIG.unit_price_estimate_usd for item in bom)
        return {
            "bom_used": [asdict(item) for item in bom],
            "cart_links": [asdict(l) for l in cart_links(bom, params.preferred_vendor)],
            "total_price_estimate_usd": round(total, 2),
            "delivery_time": CONFIG.delivery_time,
        }
