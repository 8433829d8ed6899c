"""
Tests for CSV row parsing and record mapping
"""
import pytest

from csv_parser import (
    business_from_row,
    parse_business_rows,
    parse_product_list,
    parse_product_rows,
    parse_row,
    product_from_row,
)
from exceptions import ParseError


class TestParseRow:
    """Tests for single-line field splitting"""

    def test_plain_fields(self):
        assert parse_row("a,b,c") == ["a", "b", "c"]

    def test_fields_are_trimmed(self):
        assert parse_row("  a , b ,c  ") == ["a", "b", "c"]

    def test_quoted_comma_and_escaped_quote(self):
        assert parse_row('"Smith, ""Flower"" Co"') == ['Smith, "Flower" Co']

    def test_quoted_field_among_plain_fields(self):
        assert parse_row('x,"1, 2",y') == ["x", "1, 2", "y"]

    def test_empty_fields_are_kept(self):
        assert parse_row(",,") == ["", "", ""]

    def test_empty_line_is_one_empty_field(self):
        assert parse_row("") == [""]

    def test_unterminated_quote_keeps_remaining_text(self):
        # Newlines inside quotes are not reconstructed; the row is simply cut short
        assert parse_row('a,"b, c') == ["a", "b, c"]


class TestBusinessRows:
    """Tests for the business roster parser"""

    def test_visibility_filter(self, business_csv):
        businesses = parse_business_rows(business_csv)
        names = [b.name for b in businesses]

        assert names == ["Rose Garden", "Orchid  Corner"]
        assert "Lily Pad" not in names  # inactive
        assert "Fern House" not in names  # no profile picture

    def test_positional_mapping(self, business_csv):
        rose = parse_business_rows(business_csv)[0]

        assert rose.id == "rose_garden"
        assert rose.owner_name == "Alice Perera"
        assert rose.address == "12, Temple Road"
        assert rose.has_delivery is True
        assert rose.status == "active"
        assert rose.bio == 'Roses and "rare" blooms'
        assert rose.map_location == "6.9271;79.8612"
        assert rose.delivery_cost == 250.0
        assert rose.island_wide_delivery == "Yes"
        assert rose.island_wide_delivery_cost == 1000.0

    def test_optional_trailing_columns_default(self, business_csv):
        orchid = parse_business_rows(business_csv)[1]

        assert orchid.id == "orchid_corner"
        assert orchid.has_delivery is False
        assert orchid.map_location == ""
        assert orchid.delivery_cost is None
        assert orchid.island_wide_delivery_cost is None

    def test_zero_cost_is_unset(self):
        row = ["A", "", "", "", "", "", "yes", "", "", "", "pic", "sheet", "active", "", "", "0", "", "n/a"]
        business = business_from_row(row)

        assert business.delivery_cost is None
        assert business.island_wide_delivery_cost is None

    def test_short_row_raises_parse_error(self):
        with pytest.raises(ParseError):
            business_from_row(["only", "three", "fields"])

    def test_short_rows_are_skipped_without_raising(self):
        csv_text = "header\nA,B,C\n\n"
        assert parse_business_rows(csv_text) == []

    def test_header_only(self):
        assert parse_business_rows("Name,Owner") == []

    def test_crlf_line_endings(self, business_csv):
        businesses = parse_business_rows(business_csv.replace("\n", "\r\n"))
        assert [b.id for b in businesses] == ["rose_garden", "orchid_corner"]


class TestProductRows:
    """Tests for the product sheet parser"""

    def test_grouped_in_first_seen_order(self, product_csv):
        grouped = parse_product_rows(product_csv)

        assert list(grouped.keys()) == ["Roses", "Other"]
        assert [p.name for p in grouped["Roses"]] == ["Red Rose", "White Rose"]
        assert [p.name for p in grouped["Other"]] == ["Cactus"]

    def test_product_fields(self, product_csv):
        red, white, cactus = parse_product_list(product_csv)

        assert red.price == 1500.0
        assert red.image_url == "https://drive.google.com/thumbnail?id=IMG1&sz=w1000"
        assert red.in_stock is True

        assert white.price == 0.0
        assert white.image_url == "https://example.com/white.jpg"
        assert white.in_stock is False

        assert cactus.category == "Other"
        assert cactus.price == 300.0
        assert cactus.description == "Spiky, small"
        assert cactus.image_url == ""
        assert cactus.in_stock is True

    def test_short_product_row_raises_parse_error(self):
        with pytest.raises(ParseError):
            product_from_row(["Tiny", "row"])

    def test_stock_requires_exact_phrase(self):
        row = ["Fern", "Ferns", "10", "", "", "in stock soon"]
        assert product_from_row(row).in_stock is False

    def test_bad_row_does_not_abort_parse(self, product_csv):
        csv_text = product_csv + "\nBroken,row,only"
        assert len(parse_product_list(csv_text)) == 3

    @pytest.mark.parametrize("separator", ["\x85", "\u2028", "\u2029", "\x0c"])
    def test_unicode_line_separators_stay_inside_field(self, separator):
        csv_text = (
            "Name,Category,Price,Description,Image,Stock\n"
            f"Rose,Roses,10,Caf{separator} red,,In Stock\r\n"
        )

        products = parse_product_list(csv_text)

        assert len(products) == 1
        assert products[0].description == f"Caf{separator} red"
        assert products[0].in_stock is True

    def test_overflowing_price_falls_back_to_zero(self):
        row = ["Fern", "Ferns", "1e999", "", "", "In Stock"]
        assert product_from_row(row).price == 0.0
