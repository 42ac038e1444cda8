"""
Unit tests for identifier casing helpers.
"""

import unittest

from native_spec_to_code.utils import camel_case, pascal_case, snake_case


class TestCasing(unittest.TestCase):
    def test_snake_case(self):
        self.assertEqual(snake_case("getUser"), "get_user")
        self.assertEqual(snake_case("CrabyTest"), "craby_test")
        self.assertEqual(snake_case("myHTTPClient"), "my_http_client")
        self.assertEqual(snake_case("arg0"), "arg0")
        self.assertEqual(snake_case("craby-test"), "craby_test")
        self.assertEqual(snake_case("add"), "add")

    def test_pascal_case(self):
        self.assertEqual(pascal_case("craby-test"), "CrabyTest")
        self.assertEqual(pascal_case("first_name"), "FirstName")
        self.assertEqual(pascal_case("getUser"), "GetUser")
        self.assertEqual(pascal_case("Calc"), "Calc")

    def test_camel_case(self):
        self.assertEqual(camel_case("get_user"), "getUser")
        self.assertEqual(camel_case("GetUser"), "getUser")
        self.assertEqual(camel_case("add"), "add")
        self.assertEqual(camel_case(""), "")


if __name__ == "__main__":
    unittest.main()
