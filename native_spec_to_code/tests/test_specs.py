"""
Integration tests over the sample specifications in test_data/specs.
"""

from pathlib import Path

import pytest

from native_spec_to_code.pipeline import AtomicWriter, SpecCompiler
from native_spec_to_code.pipeline.analyzer import (
    ArrayBufferType,
    ArrayType,
    EnumMember,
    NullableType,
    NumberType,
    PromiseType,
    StringType,
)
from native_spec_to_code.pipeline.writer import extract_hash

SPECS_DIR = Path(__file__).parent / "test_data" / "specs"
VALID_SPECS = ["calculator.ts", "users.ts"]


@pytest.fixture
def compiler():
    return SpecCompiler()


@pytest.mark.parametrize("name", VALID_SPECS)
def test_valid_specs_generate(compiler, name, tmp_path):
    result = compiler.compile_file(SPECS_DIR / name)
    assert result.ok, [d.format() for d in result.diagnostics]

    writer = AtomicWriter()
    files = compiler.generate(result.schemas, tmp_path)
    assert all(writer.write_result(f) for f in files)
    for f in files:
        assert f.path.is_file()
        if f.overwrite:
            assert extract_hash(f.path.read_text()) == result.content_hash

    # Regenerating the same unit leaves every file untouched
    again = compiler.generate(compiler.compile_file(SPECS_DIR / name).schemas, tmp_path)
    assert not any(writer.write_result(f) for f in again)


def test_users_schema(compiler):
    [schema] = compiler.compile_file(SPECS_DIR / "users.ts").schemas
    assert schema.module_name == "Users"
    assert [m.name for m in schema.methods] == ["clear", "getUser", "listUsers", "saveUser"]
    assert [s.name for s in schema.signals] == ["onUserChanged"]
    assert [a.name for a in schema.aliases] == ["Address", "User", "UserChanged"]
    assert [e.name for e in schema.enums] == ["Priority", "Role"]

    priority, role = schema.enums
    assert priority.members == (EnumMember("Low", 0), EnumMember("Normal", 5), EnumMember("High", 6))
    assert role.is_string

    user = schema.aliases[1]
    props = {prop.name: prop.type for prop in user.props}
    assert props["tags"] == ArrayType(StringType())
    assert props["address"] == NullableType(schema.aliases[0])
    assert props["avatar"] == NullableType(ArrayBufferType())
    assert schema.aliases[0].props[1].type == NullableType(NumberType())

    assert schema.method("getUser").ret_type == PromiseType(NullableType(user))
    assert schema.method("listUsers").ret_type == PromiseType(ArrayType(user))


def test_users_generated_code(compiler, tmp_path):
    result = compiler.compile_file(SPECS_DIR / "users.ts")
    files = {f.path.name: f.content for f in compiler.generate(result.schemas, tmp_path)}
    assert set(files) == {"users_ffi.rs", "users_impl.rs", "UsersBridging.hpp", "UsersModule.hpp"}

    ffi = files["users_ffi.rs"]
    assert "fn users_get_user(it_: usize, id: f64) -> Result<NullableUser>;" in ffi
    assert "fn users_list_users(it_: usize, role: Role) -> Result<Vec<User>>;" in ffi
    assert "        avatar: NullableArrayBuffer," in ffi
    assert '            "admin" => Ok(Role::Admin),' in ffi
    assert "            Priority::High => 6.0," in ffi

    hpp = files["UsersBridging.hpp"]
    assert hpp.index("Bridging<craby::bridging::Address>") < hpp.index("Bridging<craby::bridging::User>")
    assert hpp.index("Bridging<craby::bridging::User>") < hpp.index("Bridging<craby::bridging::UserChanged>")

    assert "pub enum UsersSignal {\n    OnUserChanged(UserChanged),\n}" in ffi
    assert "        fn users_get_on_user_changed_payload(signal: &UsersSignal) -> UserChanged;" in ffi

    module = files["UsersModule.hpp"]
    assert 'methodMap_["onUserChanged"] = MethodMetadata{1, &UsersModule::onUserChanged};' in module
    assert 'if (name == "onUserChanged") {' in module
    assert "thisModule.threadPool_->enqueue(" in module


def test_invalid_spec_diagnostics(compiler):
    result = compiler.compile_file(SPECS_DIR / "invalid.ts")
    assert result.schemas == []
    assert [(d.span.line, d.message) for d in result.diagnostics] == [
        (5, "Optional property is not supported"),
        (9, "Function parameter is not supported"),
        (10, "Reserved method name `emit` is not allowed"),
    ]
