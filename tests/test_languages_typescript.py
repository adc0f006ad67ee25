"""TypeScript-family providers: typescript, typescriptreact and javascript."""

from __future__ import annotations

import unittest

from outlinemap.languages import get_provider, typescript, typescriptreact
from outlinemap.render import render_outline
from outlinemap.types import COMMENT, MARKER


def display(line: str) -> str | None:
    symbol = typescript.parse_symbol(line)
    return symbol.display if symbol is not None else None


class TypeScriptDeclarationTests(unittest.TestCase):
    def test_top_level_declarations(self) -> None:
        self.assertEqual(display("export default class App extends Base {"), "class App")
        self.assertEqual(display("export interface Props {"), "interface Props")
        self.assertEqual(display("type Id = string"), "type Id")
        self.assertEqual(display("export const enum Color {"), "enum Color")
        self.assertEqual(display("namespace Utils {"), "namespace Utils")
        self.assertEqual(display("declare module Vendor.Lib {"), "module Vendor.Lib")
        self.assertEqual(display("export async function* gen() {"), "function gen")

    def test_bindings_with_function_values_are_functions(self) -> None:
        self.assertEqual(display("const add = (a: number, b: number) => a + b"), "function add")
        self.assertEqual(display("export const handler = async (e) => {"), "function handler")
        self.assertEqual(display("const fmt = function (x) {"), "function fmt")
        self.assertEqual(display("const id = <T,>(value: T) => value"), "function id")
        self.assertEqual(display("const double = x => x * 2"), "function double")

    def test_plain_bindings_keep_their_keyword(self) -> None:
        symbol = typescript.parse_symbol("let count = 0")
        self.assertEqual((symbol.keyword, symbol.capture_type, symbol.display), ("let", "variable", "let count"))
        self.assertEqual(display("const x: Foo = bar"), "const x")

    def test_class_members(self) -> None:
        self.assertEqual(display("private async fetchData(id: string): Promise<void> {"), "method fetchData")
        self.assertEqual(display("get value(): number {"), "method get value")
        self.assertEqual(display("onClick = () => {"), "method onClick")
        self.assertEqual(display("name?: string;"), "property name")
        self.assertEqual(display("*items() {"), "method items")

    def test_statements_are_not_members(self) -> None:
        for line in ("if (ready) {", "foo(bar);", "return value", "} else {", "@Component({"):
            self.assertIsNone(display(line), line)


class TypeScriptCommentTests(unittest.TestCase):
    def test_comment_line_detection(self) -> None:
        for line in ("// x", "/* x", "*/", "* item", "*", "{/* jsx */}"):
            self.assertTrue(typescript.is_comment_line(line), line)
        self.assertFalse(typescript.is_comment_line("*gen() {}"))

    def test_jsx_comment_marker(self) -> None:
        extracted = typescript.extract_comment("{/* TODO: fix layout */}")
        self.assertEqual((extracted.marker, extracted.text), ("TODO", "fix layout"))

    def test_block_comment_renders_first_meaningful_line_once(self) -> None:
        lines = [
            "const a = 1",
            "/**",
            " * @param x value",
            " * Computes things.",
            " * More detail.",
            " */",
            "function f(x) {}",
        ]
        rendered = render_outline(lines, "typescript")
        self.assertEqual(tuple(rendered.mapping), (1, 4, 7))
        comment = rendered.entries[1]
        self.assertEqual(comment.kind, COMMENT)
        self.assertEqual(comment.display_text, "Computes things.")
        self.assertTrue(comment.is_doc_comment)

    def test_block_comment_falls_back_to_first_marker(self) -> None:
        lines = ["let a = 1", "/*", " * FIXME: racy", " * @see other", " */"]
        rendered = render_outline(lines, "typescript")
        self.assertEqual(tuple(rendered.mapping), (1, 3))
        self.assertEqual(rendered.entries[1].kind, MARKER)

    def test_single_line_block_comment(self) -> None:
        lines = ["let a = 1", "/* simple */"]
        rendered = render_outline(lines, "typescript")
        self.assertEqual(rendered.entries[1].display_text, "simple")


class TypeScriptReactTests(unittest.TestCase):
    def test_hooks_are_labelled(self) -> None:
        cases = {
            "const [count, setCount] = useState(0)": "hook useState count",
            "useEffect(() => {": "hook useEffect",
            "const theme = React.useContext(ThemeContext)": "hook useContext theme",
            "const ref = useRef<HTMLDivElement>(null)": "hook useRef ref",
            "const { data } = useQuery(key)": "hook useQuery data",
        }
        for line, expected in cases.items():
            symbol = typescriptreact.parse_symbol(line)
            self.assertEqual((symbol.keyword, symbol.display), ("hook", expected), line)

    def test_wrapped_components_are_functions(self) -> None:
        symbol = typescriptreact.parse_symbol("export const Button = memo((props: Props) => {")
        self.assertEqual((symbol.keyword, symbol.display), ("function", "function Button"))

    def test_falls_back_to_typescript_rules(self) -> None:
        self.assertEqual(typescriptreact.parse_symbol("const App = () => {").display, "function App")
        self.assertEqual(typescriptreact.parse_symbol("interface Props {").display, "interface Props")

    def test_provider_uses_tsx_grammar_and_hook_keyword(self) -> None:
        provider = get_provider("typescriptreact")
        self.assertEqual(provider.grammar, "tsx")
        self.assertIn("hook", provider.default_keywords)
        self.assertIs(provider.render_comment, typescript.render_comment)


class JavaScriptTests(unittest.TestCase):
    def test_type_only_declarations_are_hidden(self) -> None:
        rendered = render_outline(["class A {}", "interface B {}", "const c = 1"], "javascript")
        self.assertEqual(tuple(rendered.mapping), (1, 3))
        self.assertEqual(get_provider("javascript").grammar, "javascript")


if __name__ == "__main__":
    unittest.main()
