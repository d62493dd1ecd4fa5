from rich.pretty import pprint

from sargparse import *

__prog__ = "counter"

parser = ArgumentParser("count things", shell=True)
parser.add_argument("", "target", "what to count")
parser.add_argument("-c", "--count", "how many", required=True, dtype=DataType.INTEGER)
parser.add_argument("-r", "--ratio", "scale factor", default=1.0, dtype=DataType.FLOAT)
parser.add_argument("-v", "--verbose", "chatty output", default=False, dtype=DataType.BOOLEAN)


if __name__ == '__main__':
    if (arguments := parser.parse_args()) is not None:
        pprint(arguments)
