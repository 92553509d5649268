#!/usr/bin/env python3
"""
Demo: parse, edit and dump a small table.

Shows header lookup, typed accessors, structural edits, quoting on dump,
and mapping rows to dataclass records.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from csvgrid import CsvBuilder, parse_string
from csvgrid.logging_config import setup_logging


PEOPLE = (
    "Name,LastName,Height,DateOfBirth\n"
    "Mario,Rossi,1.76,10/22/2000\n"
    "John,Doe,1.82,08/16/1996\n"
    "Mary,Jean,1.61,10/21/1995"
)


@dataclass
class Person:
    appellative: str = field(default="", metadata={"csv_header": "Name"})
    last_name: str = field(default="", metadata={"csv_header": "LastName"})
    height: float = field(default=0.0, metadata={"csv_header": "Height"})
    date_of_birth: datetime = field(default=datetime.min, metadata={"csv_header": "DateOfBirth"})


def main():
    setup_logging(logging.DEBUG)

    document = parse_string(PEOPLE)

    print("=" * 80)
    print("CSVGRID DEMO")
    print("=" * 80)
    print(f"\n{document!r} with headers {document.column_headers}")
    print(f"Tallest: {max(c.float_value for c in document['Height'])}")

    # Structural edits
    document.create_column("Nickname", index=1)
    document[0, "Nickname"].string_value = "Super, Mario"
    row = document.create_row(0)
    row["Name"].string_value = "Luigi"
    row["Height"].float_value = 1.85
    document.remove_row(document.rows_count - 1)

    print("\nEDITED DOCUMENT:")
    print("-" * 80)
    print(document.dump())

    print("\nMAPPED RECORDS:")
    print("-" * 80)
    for person in document.map_to_type(Person, start_row_index=1):
        print(person)

    italian = CsvBuilder().using_separator(";").using_parsing_culture("it-IT")
    print("\nSAME TABLE, ITALIAN DIALECT:")
    print("-" * 80)
    print(italian.parse(document.dump(separator=";")).dump())
    print("=" * 80)


if __name__ == "__main__":
    main()
