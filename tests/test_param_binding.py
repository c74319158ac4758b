from eventtrace.param_binding import (
    build_class_parameter_map,
    build_parameter_map,
    declared_type_aliases,
    import_renames,
    resolve_alias,
)
from eventtrace.ts_frontend import parse_text, top_level_declarations


def _first_decl(src: str):
    return next(top_level_declarations(parse_text(src)))


def _function_params(src: str):
    fn = _first_decl(src)
    return build_parameter_map(fn.child_by_field_name("parameters"))


def test_named_and_generic_types_bind_to_their_name():
    bindings = _function_params("function f(repo: OrderRepo, cache: Cache<Order>, log: ns.Logger) {}")
    assert bindings == {"repo": "OrderRepo", "cache": "Cache", "log": "Logger"}


def test_non_named_types_get_unmatchable_token():
    bindings = _function_params("function f(id: string, items: Order[], x: A | B) {}")
    assert bindings["id"] == "<predefined_type>"
    assert bindings["items"] == "<array_type>"
    assert bindings["x"] == "<union_type>"
    assert not any(v.isidentifier() for v in bindings.values())


def test_untyped_and_optional_parameters():
    bindings = _function_params("function f(x, y?: Clock, z = 3) {}")
    assert bindings == {"x": None, "y": "Clock", "z": None}


def test_destructured_rest_and_this_parameters_are_skipped():
    bindings = _function_params("function f(this: Ctx, { a, b }: Opts, [c]: Pair, ...rest: Item[]) {}")
    assert bindings == {}


def test_class_bindings_come_from_first_constructor():
    cls = _first_decl(
        """
        export class PlaceOrderHandler {
          handle() { this.orders.place(); }
          constructor(private readonly orders: OrderService, public clock: Clock) {}
        }
        """
    )
    assert build_class_parameter_map(cls) == {"orders": "OrderService", "clock": "Clock"}


def test_class_without_constructor_has_no_bindings():
    cls = _first_decl("class Plain { run() { this.x.y(); } }")
    assert build_class_parameter_map(cls) == {}


def test_declared_type_aliases_keep_named_targets_only():
    tree = parse_text(
        """
        export type Repo = OrderRepository;
        type Cache = Store<Order>;
        type Id = string | number;
        """
    )
    assert declared_type_aliases(tree) == {"Repo": "OrderRepository", "Cache": "Store"}


def test_import_renames_map_local_to_imported_name():
    tree = parse_text(
        """
        import { OrderService as Svc, Clock } from './svc';
        import { Bus as EventBus } from '../bus';
        """
    )
    assert import_renames(tree) == {"Svc": "OrderService", "EventBus": "Bus"}


def test_resolve_alias_follows_chains_and_stops_on_cycles():
    aliases = {"A": "B", "B": "C", "X": "Y", "Y": "X"}
    assert resolve_alias(aliases, "A") == "C"
    assert resolve_alias(aliases, "Plain") == "Plain"
    assert resolve_alias(aliases, None) is None
    assert resolve_alias(aliases, "X") in {"X", "Y"}


def test_aliases_apply_to_bound_types():
    fn = _first_decl("function f(repo: Repo, svc: Svc, raw) {}")
    bindings = build_parameter_map(fn.child_by_field_name("parameters"), {"Repo": "OrderRepository", "Svc": "OrderService"})
    assert bindings == {"repo": "OrderRepository", "svc": "OrderService", "raw": None}
