"""Ways for the operator to pick which records move on to the next stage.

A selection provider is any callable taking a sequence and returning the
chosen items as a list.
"""

from .console import main_color, RESET


def select_all(items):
    return list(items)


def parse_choice(answer, count):
    """Turn ``all``, blank or ``1,3-5`` into zero-based indexes. Raises ValueError."""
    answer = answer.strip().lower()
    if not answer:
        return []
    if answer in ("all", "a", "*"):
        return list(range(count))

    indexes = []
    for part in answer.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start, end = (int(x) for x in part.split("-", 1))
            if start > end:
                start, end = end, start
            numbers = range(start, end + 1)
        else:
            numbers = [int(part)]
        for number in numbers:
            if not 1 <= number <= count:
                raise ValueError(f"{number} is not between 1 and {count}")
            if number - 1 not in indexes:
                indexes.append(number - 1)
    return sorted(indexes)


class TerminalSelector:
    """Numbered list in the console, answered with ``input()``."""

    def __init__(self, title, describe=str, prompt=input, out=print):
        self.title = title
        self.describe = describe
        self.prompt = prompt
        self.out = out

    def __call__(self, items):
        items = list(items)
        if not items:
            self.out(f"\nNo {self.title} to choose from.")
            return []

        self.out(f"\n{main_color}{self.title.upper()}{RESET}")
        width = len(str(len(items)))
        for i, item in enumerate(items, start=1):
            self.out(f"{str(i).rjust(width)}) {self.describe(item)}")

        while True:
            answer = self.prompt("\nSelect (e.g. 1,3-5), 'all', or ENTER for none: ")
            try:
                return [items[i] for i in parse_choice(answer, len(items))]
            except ValueError:
                self.out("Invalid Option: Please try again.")
