from decimal import Decimal
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def rupiah(value) -> str:
    """1520000 -> 'Rp1.520.000'"""
    amount = Decimal(value or 0).quantize(Decimal("1"))
    return "Rp" + f"{amount:,}".replace(",", ".")


env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)
env.filters["rupiah"] = rupiah


def render_template(template_path: str, **context) -> str:
    return env.get_template(template_path).render(**context)
