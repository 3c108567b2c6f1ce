"""Generate an example .vcf file to see what the format looks like."""

import sys
sys.path.insert(0, str(__import__("pathlib").Path(__file__).parent.parent))

from vcard.card import Card, Property
from vcard.writer import VCardWriter

gump = Card()
gump.add("VERSION", Property(["3.0"]))
gump.add("N", Property(["Gump;Forrest;;Mr.;"]))
gump.add("FN", Property(["Forrest Gump"]))
gump.add("ORG", Property(["Bubba Gump Shrimp Co."]))
gump.add("TITLE", Property(["Shrimp Man"]))
gump.add("TEL", Property(["(111) 555-1212"], params={"TYPE": ["WORK", "VOICE"]}))
gump.add("TEL", Property(["(404) 555-1212"], params={"TYPE": ["HOME", "VOICE"]}))
gump.add("ADR", Property(
    [";;100 Waters Edge;Baytown;LA;30314;United States of America"],
    params={"TYPE": ["WORK", "PREF"]},
))
gump.add("LABEL", Property(
    ["100 Waters Edge\nBaytown, LA 30314\nUnited States of America"],
    params={"TYPE": ["WORK", "PREF"]},
))
gump.add("EMAIL", Property(["forrestgump@example.com"], group="item1"))
gump.add("X-ABLABEL", Property(["Shrimp business"], group="item1"))
gump.add("NOTE", Property([
    "Life was like a box of chocolates, you never know what you're gonna get. "
    "This note is long enough to be folded across several physical lines."
]))
gump.add("REV", Property(["2008-04-24T19:52:43Z"]))

jenny = Card()
jenny.add("VERSION", Property(["3.0"]))
jenny.add("FN", Property(["Jenny Curran"]))
jenny.add("EMAIL", Property(["jenny@example.com"], params={"TYPE": ["INTERNET", "HOME"]}))

# Write the example
output = str(__import__("pathlib").Path(__file__).parent / "contacts.vcf")
nbytes = VCardWriter.write([gump, jenny], output)
print(f"Generated {output} ({nbytes} bytes)")

# Also print the raw content so you can see the format
print()
print("=" * 60)
print("RAW .vcf FILE CONTENTS:")
print("=" * 60)
print()
print(VCardWriter.serialize_all([gump, jenny]).replace("\r\n", "\n"))
