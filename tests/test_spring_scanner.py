import textwrap

from apinav.domain.models import ScannerConfig
from apinav.scanners.ecosystems.java import SPRING_BOOT
from apinav.scanners.engine import LineScanner


def scanner(**kw) -> LineScanner:
    return LineScanner(SPRING_BOOT, ScannerConfig(file_extensions={"java"}), **kw)


def parse(src: str, **kw):
    return scanner(**kw).parse_file(textwrap.dedent(src), "/src/UserController.java")


def test_minimal_controller():
    src = """\
    package demo;

    import org.springframework.web.bind.annotation.*;

    @RestController
    @RequestMapping("/api")
    public class UserController {

        @GetMapping("/users")
        public List<User> list() {
            return service.findAll();
        }
    }
    """
    eps = parse(src)
    assert len(eps) == 1
    e = eps[0]
    assert e.api_path == "/api/users"
    assert e.method_name == "list"
    assert e.http_method == "GET"
    assert e.class_name == "UserController"
    assert e.line_number == 9
    assert e.language == "java"
    assert e.return_type == "List<User>"


def test_request_mapping_method_and_named_arguments():
    src = """
    @RestController
    @RequestMapping(path = "/orders")
    public class OrderController {
        @RequestMapping(value = "/create", method = RequestMethod.POST)
        public Order create(@RequestBody Order order) {
            return order;
        }

        @RequestMapping("/legacy")
        public String legacy() { return "x"; }

        @DeleteMapping
        public void clear() {}
    }
    """
    eps = parse(src)
    assert [(e.http_method, e.api_path, e.method_name) for e in eps] == [
        ("POST", "/orders/create", "create"),
        ("GET", "/orders/legacy", "legacy"),
        ("DELETE", "/orders", "clear"),
    ]
    assert eps[0].parameters == ("@RequestBody Order order",)
    assert eps[0].return_type == "Order"


def test_parameters_split_at_top_level_only():
    src = """
    @RestController
    public class SearchController {
        @GetMapping("/search")
        public ResponseEntity<Page<Item>> search(@RequestParam(required = false) String q, Pageable page) {
            return null;
        }
    }
    """
    (e,) = parse(src)
    assert e.api_path == "/search"
    assert e.parameters == ("@RequestParam(required = false) String q", "Pageable page")
    assert e.return_type == "ResponseEntity<Page<Item>>"


def test_annotations_between_mapping_and_method_are_skipped():
    src = """
    @RestController
    @RequestMapping("/")
    public class HealthController {
        @GetMapping("/health")
        @ResponseStatus(HttpStatus.OK)
        // liveness only
        public String health() {
            return "ok";
        }
    }
    """
    (e,) = parse(src)
    assert e.api_path == "/health"
    assert e.method_name == "health"


def test_mapping_without_method_in_window_is_dropped():
    filler = "\n".join("    // filler" for _ in range(10))
    src = (
        "@RestController\n"
        "public class C {\n"
        '    @GetMapping("/orphan")\n'
        f"{filler}\n"
        "    public String late() { return \"\"; }\n"
        "}\n"
    )
    assert scanner(lookahead_lines=8).parse_file(src, "/src/C.java") == []

    (e,) = scanner(lookahead_lines=20).parse_file(src, "/src/C.java")
    assert e.method_name == "late"


def test_base_path_resets_for_second_controller():
    src = """
    @RestController
    @RequestMapping("/a")
    class A {
        @GetMapping("/x")
        public String x() { return ""; }
    }

    @RestController
    class B {
        @PostMapping("/y")
        public String y() { return ""; }
    }
    """
    eps = parse(src)
    assert [(e.class_name, e.api_path) for e in eps] == [("A", "/a/x"), ("B", "/y")]


def test_mappings_outside_controller_are_ignored():
    src = """
    @Component
    public class Client {
        @RequestMapping("/not-a-route")
        public String call() { return ""; }
    }
    """
    s = scanner()
    text = textwrap.dedent(src)
    assert s.is_valid_file(text)
    assert s.parse_file(text, "/src/Client.java") == []


def test_javadoc_is_not_scanned():
    src = """
    @RestController
    public class DocController {
        /**
         * @GetMapping("/fake")
         */
        @GetMapping("/real")
        public String real() { return ""; }
    }
    """
    eps = parse(src)
    assert [e.api_path for e in eps] == ["/real"]


def test_gate_rejects_plain_java():
    s = scanner()
    assert not s.is_valid_file("public class Plain { void run() {} }")
    assert s.parse_file('class X {\n@GetMapping("/x")\npublic void x() {}\n}', "/X.java") == []
