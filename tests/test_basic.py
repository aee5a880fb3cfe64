"""Basic tests for the Struct record type."""

from typing import Annotated, Dict, List, Optional

import pytest

from structvault import Struct, tag


class TestBasicFunctionality:
    """Test basic struct creation and field access."""

    def test_simple_struct(self):
        """Test creating a simple struct."""

        class Point(Struct):
            x: int
            y: int = 0

        p1 = Point(10, 20)
        p2 = Point(x=5, y=15)
        p3 = Point(30)  # Using default for y

        assert p1.x == 10
        assert p1.y == 20
        assert p2.x == 5
        assert p2.y == 15
        assert p3.x == 30
        assert p3.y == 0

    def test_field_mutation(self):
        """Test field mutation is type checked."""

        class Point(Struct):
            x: int
            y: int

        point = Point(10, 20)
        point.x = 100
        assert point.x == 100

        with pytest.raises(TypeError, match="Field 'x' expects"):
            point.x = "100"

    def test_optional_and_generic_fields(self):
        """Optional fields accept None; generics check their origin."""

        class Profile(Struct):
            nickname: Optional[str] = None
            tags: List[str] = list
            scores: Dict[str, int] = dict
            ratio: float = 0.0

        profile = Profile(ratio=1)
        assert profile.nickname is None
        assert profile.tags == []
        assert profile.scores == {}
        assert profile.ratio == 1

        profile.nickname = "jo"
        with pytest.raises(TypeError):
            profile.tags = "not-a-list"

    def test_inherited_fields(self):
        """Base class fields come first, in declaration order."""

        class Base(Struct):
            id: str = ""

        class Child(Base):
            name: str = ""

        child = Child("abc", "name")
        assert Child._fields == ["id", "name"]
        assert child.id == "abc"

    def test_to_dict(self):
        """to_dict uses native names and ignores tags."""

        class Address(Struct):
            city: Annotated[str, tag("city_name,required")]

        class Person(Struct):
            name: Annotated[str, tag("full_name")]
            addresses: List[Address] = list

        person = Person("Alice", [Address("Paris")])
        assert person.to_dict() == {"name": "Alice", "addresses": [{"city": "Paris"}]}

    def test_builder_pattern(self):
        """Test fluent builder interface."""

        class Person(Struct):
            name: str
            age: int
            email: str = ""

        person = (
            Person.builder().name("Alice").age(30).email("alice@example.com").build()
        )

        assert person.name == "Alice"
        assert person.age == 30
        assert person.email == "alice@example.com"

    def test_metadata_and_tags(self):
        """Tags are extracted from Annotated metadata alongside other metadata."""

        class Product(Struct):
            name: Annotated[str, tag("name,required"), "Product name"]
            price: Annotated[float, {"currency": "USD"}]

        assert Product.get_field_tag("name") == "name,required"
        assert Product.get_field_tag("price") == ""
        assert Product.get_field_metadata("name") == (tag("name,required"), "Product name")
        assert Product._types["name"] is str

    def test_equality(self):
        """Structs compare by field values."""

        class Point(Struct):
            x: int
            y: int

        assert Point(1, 2) == Point(1, 2)
        assert Point(1, 2) != Point(2, 1)

    def test_error_handling(self):
        """Test various error conditions."""

        class TestStruct(Struct):
            field1: str
            field2: int

        with pytest.raises(TypeError, match="Invalid field"):
            TestStruct(field1="test", invalid_field="value")

        with pytest.raises(TypeError, match="Missing required field"):
            TestStruct(field1="test")

        with pytest.raises(TypeError, match="Too many arguments"):
            TestStruct("a", 1, 2)

        obj = TestStruct("test", 42)
        with pytest.raises(AttributeError, match="has no field"):
            obj.nonexistent = "value"
