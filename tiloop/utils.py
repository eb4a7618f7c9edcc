import enum


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


def format_number(v: float) -> str:
    """Formats a number the way the calculator screen shows it: 5 rather than 5.0"""
    if v.is_integer() and abs(v) < 1e21:
        return str(int(v))
    return repr(v)
