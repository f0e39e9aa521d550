"""
Breaking-change comparator for API contracts.

``ContractComparator`` walks two ``ApiContract`` versions and classifies
every difference as Breaking or NonBreaking from the point of view of an
existing, unmodified consumer.

Classification rules:

- Endpoints: removed is Breaking, added is NonBreaking.
- Status codes: removed is Breaking, added is NonBreaking.
- Request bodies (what clients send):
    - new required field is Breaking, new optional field is NonBreaking;
    - optional field becoming required is Breaking;
    - removed field or relaxed requirement is NonBreaking.
- Response bodies (what clients parse):
    - any removed field is Breaking, so is a required field becoming optional;
    - new fields are NonBreaking whether required or not.
- Either side: kind change is ``TypeChanged`` and any format change is
  ``FormatChanged`` (both Breaking); enum narrowing is Breaking and
  widening NonBreaking.
- Nullability: a response field becoming nullable or a request field
  becoming non-nullable is Breaking; the reverse is NonBreaking.

Read-only properties are ignored on the request side and write-only ones
on the response side.  Matcher bodies are compared through their schema
equivalent.

The comparator holds no state and never logs; it is safe to share.

Usage::

    from treatycore.comparison.comparator import ContractComparator

    diff = ContractComparator().compare(v1, v2)
    for change in diff.breaking_changes:
        print(change)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from treatycore._json import canonical, render_literal
from treatycore.comparison.changes import Change, ContractDiff
from treatycore.contracts.endpoint import (
    ApiContract,
    EndpointContract,
    HeaderExpectation,
    QueryParameterExpectation,
    RequestExpectation,
    ResponseExpectation,
)
from treatycore.diagnostics.otel import emit_contract_diff
from treatycore.matching.match import matcher_to_schema
from treatycore.matching.matchers import MatcherBase
from treatycore.schema.nodes import SchemaNode
from treatycore.types import (
    ChangeKind,
    ChangeLocation,
    ChangeSeverity,
    ValidationDirection,
)
from treatycore.validation import paths

BREAKING = ChangeSeverity.BREAKING
NON_BREAKING = ChangeSeverity.NON_BREAKING


def _as_schema(body: Union[SchemaNode, MatcherBase]) -> SchemaNode:
    if isinstance(body, MatcherBase):
        return matcher_to_schema(body)
    return body


def _shape(node: SchemaNode) -> str:
    if node.composition is not None:
        return f"{node.composition.mode.value}[{len(node.composition.branches)}]"
    return node.kind.value


@dataclass(frozen=True)
class _Site:
    """Where changes are being recorded: endpoint, location and status."""

    method: Optional[str]
    path: Optional[str]
    location: ChangeLocation
    status_code: Optional[int] = None

    @property
    def where(self) -> str:
        text = f"{self.method} {self.path}" if self.method else "schema"
        if self.status_code is not None:
            text += f" (status {self.status_code})"
        return text

    def change(
        self,
        kind: ChangeKind,
        severity: ChangeSeverity,
        description: str,
        field: Optional[str] = None,
        old_value: Optional[str] = None,
        new_value: Optional[str] = None,
        location: Optional[ChangeLocation] = None,
    ) -> Change:
        return Change(
            kind=kind,
            severity=severity,
            description=description,
            location=location or self.location,
            method=self.method,
            path=self.path,
            field=field,
            old_value=old_value,
            new_value=new_value,
        )


class ContractComparator:
    """Compares two contract versions and classifies every difference."""

    def compare(self, old: ApiContract, new: ApiContract) -> ContractDiff:
        """Return every change between *old* and *new*, in a stable order.

        Raises:
            TypeError: If either contract is None.
        """
        if old is None or new is None:
            raise TypeError("contracts must not be None")
        old_by_key = {e.key: e for e in old.endpoints}
        new_by_key = {e.key: e for e in new.endpoints}
        changes: list[Change] = []

        for key, endpoint in old_by_key.items():
            if key not in new_by_key:
                changes.append(Change(
                    kind=ChangeKind.ENDPOINT_REMOVED,
                    severity=BREAKING,
                    description=f"Endpoint removed: {endpoint}",
                    method=endpoint.method,
                    path=endpoint.path_template,
                ))
        for key, endpoint in new_by_key.items():
            if key not in old_by_key:
                changes.append(Change(
                    kind=ChangeKind.ENDPOINT_ADDED,
                    severity=NON_BREAKING,
                    description=f"Endpoint added: {endpoint}",
                    method=endpoint.method,
                    path=endpoint.path_template,
                ))
        for key, endpoint in old_by_key.items():
            if key in new_by_key:
                changes.extend(self.compare_endpoints(endpoint, new_by_key[key]))

        return ContractDiff(
            old_name=_contract_label(old), new_name=_contract_label(new), changes=changes
        )

    def compare_endpoints(self, old: EndpointContract, new: EndpointContract) -> list[Change]:
        """Changes between two versions of the same endpoint."""
        out: list[Change] = []
        method, path = new.method, new.path_template
        self._diff_request(old.request, new.request, _Site(method, path, ChangeLocation.REQUEST_BODY), out)
        self._diff_headers(
            old.headers, new.headers, ValidationDirection.REQUEST,
            _Site(method, path, ChangeLocation.REQUEST_HEADER), out,
        )
        self._diff_query(old.query_parameters, new.query_parameters,
                         _Site(method, path, ChangeLocation.QUERY_PARAMETER), out)
        self._diff_responses(old, new, out)
        return out

    def compare_schemas(
        self,
        old: Union[SchemaNode, MatcherBase],
        new: Union[SchemaNode, MatcherBase],
        direction: Union[ValidationDirection, str],
    ) -> list[Change]:
        """Changes between two body schemas used in *direction*.

        Raises:
            TypeError: If a schema or the direction is None.
        """
        if old is None or new is None:
            raise TypeError("schemas must not be None")
        if direction is None:
            raise TypeError("direction must not be None")
        direction = ValidationDirection(direction)
        location = (
            ChangeLocation.REQUEST_BODY
            if direction == ValidationDirection.REQUEST
            else ChangeLocation.RESPONSE_BODY
        )
        out: list[Change] = []
        self._diff_node(
            _as_schema(old), _as_schema(new), paths.ROOT, direction,
            _Site(None, None, location), out,
        )
        return out

    # -- endpoint parts ----------------------------------------------------

    def _diff_request(
        self,
        old: Optional[RequestExpectation],
        new: Optional[RequestExpectation],
        site: _Site,
        out: list[Change],
    ) -> None:
        old_body = old.body if old is not None else None
        new_body = new.body if new is not None else None

        if old_body is None and new_body is None:
            return
        if old_body is None:
            assert new is not None
            if new.required:
                out.append(site.change(
                    ChangeKind.REQUIRED_ADDED, BREAKING,
                    f"Required request body added to {site.where}",
                ))
            else:
                out.append(site.change(
                    ChangeKind.FIELD_ADDED, NON_BREAKING,
                    f"Optional request body added to {site.where}",
                ))
            return
        if new_body is None:
            out.append(site.change(
                ChangeKind.FIELD_REMOVED, NON_BREAKING, f"Request body removed from {site.where}"
            ))
            return

        assert old is not None and new is not None
        if not old.required and new.required:
            out.append(site.change(
                ChangeKind.REQUIRED_ADDED, BREAKING, f"Request body became required for {site.where}"
            ))
        elif old.required and not new.required:
            out.append(site.change(
                ChangeKind.REQUIRED_REMOVED, NON_BREAKING, f"Request body became optional for {site.where}"
            ))
        self._diff_node(
            _as_schema(old_body), _as_schema(new_body), paths.ROOT,
            ValidationDirection.REQUEST, site, out,
        )

    def _diff_responses(
        self, old: EndpointContract, new: EndpointContract, out: list[Change]
    ) -> None:
        method, path = new.method, new.path_template
        for old_response in old.responses:
            code = old_response.status_code
            new_response = new.response_for(code)
            if new_response is None:
                out.append(Change(
                    kind=ChangeKind.STATUS_CODE_REMOVED,
                    severity=BREAKING,
                    description=f"Response status code {code} removed from {old}",
                    location=ChangeLocation.STATUS_CODE,
                    method=method,
                    path=path,
                    old_value=str(code),
                ))
                continue
            self._diff_response(
                old_response, new_response,
                _Site(method, path, ChangeLocation.RESPONSE_BODY, code), out,
            )
        for new_response in new.responses:
            code = new_response.status_code
            if old.response_for(code) is None:
                out.append(Change(
                    kind=ChangeKind.STATUS_CODE_ADDED,
                    severity=NON_BREAKING,
                    description=f"Response status code {code} added to {new}",
                    location=ChangeLocation.STATUS_CODE,
                    method=method,
                    path=path,
                    new_value=str(code),
                ))

    def _diff_response(
        self,
        old: ResponseExpectation,
        new: ResponseExpectation,
        site: _Site,
        out: list[Change],
    ) -> None:
        header_site = _Site(site.method, site.path, ChangeLocation.RESPONSE_HEADER, site.status_code)
        self._diff_headers(old.headers, new.headers, ValidationDirection.RESPONSE, header_site, out)

        if old.body is None and new.body is None:
            return
        if old.body is None:
            out.append(site.change(
                ChangeKind.FIELD_ADDED, NON_BREAKING, f"Response body schema added to {site.where}"
            ))
            return
        if new.body is None:
            out.append(site.change(
                ChangeKind.FIELD_REMOVED, BREAKING, f"Response body schema removed from {site.where}"
            ))
            return
        self._diff_node(
            _as_schema(old.body), _as_schema(new.body), paths.ROOT,
            ValidationDirection.RESPONSE, site, out,
        )

    def _diff_headers(
        self,
        old: list[HeaderExpectation],
        new: list[HeaderExpectation],
        direction: ValidationDirection,
        site: _Site,
        out: list[Change],
    ) -> None:
        side = "Request" if direction == ValidationDirection.REQUEST else "Response"
        old_by_name = {h.name.lower(): h for h in old}
        new_by_name = {h.name.lower(): h for h in new}

        for key, header in old_by_name.items():
            updated = new_by_name.get(key)
            if updated is None:
                severity = NON_BREAKING if direction == ValidationDirection.REQUEST else BREAKING
                out.append(site.change(
                    ChangeKind.HEADER_REMOVED, severity,
                    f"{side} header '{header.name}' removed from {site.where}",
                    field=header.name,
                ))
                continue
            if direction != ValidationDirection.REQUEST:
                continue
            if not header.required and updated.required:
                out.append(site.change(
                    ChangeKind.REQUIRED_ADDED, BREAKING,
                    f"Request header '{header.name}' became required for {site.where}",
                    field=header.name,
                ))
            elif header.required and not updated.required:
                out.append(site.change(
                    ChangeKind.REQUIRED_REMOVED, NON_BREAKING,
                    f"Request header '{header.name}' no longer required for {site.where}",
                    field=header.name,
                ))

        for key, header in new_by_name.items():
            if key in old_by_name:
                continue
            if direction == ValidationDirection.REQUEST and header.required:
                severity = BREAKING
                text = f"Required request header '{header.name}' added to {site.where}"
            else:
                severity = NON_BREAKING
                text = f"{side} header '{header.name}' added to {site.where}"
            out.append(site.change(ChangeKind.HEADER_ADDED, severity, text, field=header.name))

    def _diff_query(
        self,
        old: list[QueryParameterExpectation],
        new: list[QueryParameterExpectation],
        site: _Site,
        out: list[Change],
    ) -> None:
        old_by_name = {p.name: p for p in old}
        new_by_name = {p.name: p for p in new}

        for name, param in old_by_name.items():
            updated = new_by_name.get(name)
            if updated is None:
                out.append(site.change(
                    ChangeKind.QUERY_PARAMETER_REMOVED, NON_BREAKING,
                    f"Query parameter '{name}' removed from {site.where}",
                    field=name,
                ))
                continue
            if not param.required and updated.required:
                out.append(site.change(
                    ChangeKind.REQUIRED_ADDED, BREAKING,
                    f"Query parameter '{name}' became required for {site.where}",
                    field=name,
                ))
            elif param.required and not updated.required:
                out.append(site.change(
                    ChangeKind.REQUIRED_REMOVED, NON_BREAKING,
                    f"Query parameter '{name}' no longer required for {site.where}",
                    field=name,
                ))
            if param.type != updated.type:
                out.append(site.change(
                    ChangeKind.TYPE_CHANGED, BREAKING,
                    f"Query parameter '{name}' type changed from {param.type.value} "
                    f"to {updated.type.value} for {site.where}",
                    field=name, old_value=param.type.value, new_value=updated.type.value,
                ))

        for name, param in new_by_name.items():
            if name in old_by_name:
                continue
            if param.required:
                out.append(site.change(
                    ChangeKind.QUERY_PARAMETER_ADDED, BREAKING,
                    f"Required query parameter '{name}' added to {site.where}",
                    field=name,
                ))
            else:
                out.append(site.change(
                    ChangeKind.QUERY_PARAMETER_ADDED, NON_BREAKING,
                    f"Optional query parameter '{name}' added to {site.where}",
                    field=name,
                ))

    # -- schema trees ------------------------------------------------------

    def _diff_node(
        self,
        old: SchemaNode,
        new: SchemaNode,
        path: str,
        direction: ValidationDirection,
        site: _Site,
        out: list[Change],
    ) -> None:
        if old.is_composition or new.is_composition:
            self._diff_composition(old, new, path, direction, site, out)
            return

        if old.kind != new.kind:
            out.append(site.change(
                ChangeKind.TYPE_CHANGED, BREAKING,
                f"Type of '{path}' changed from {old.kind.value} to {new.kind.value} in {site.where}",
                field=path, old_value=old.kind.value, new_value=new.kind.value,
            ))
            return

        self._diff_nullability(old, new, path, direction, site, out)

        if (old.format or None) != (new.format or None):
            out.append(site.change(
                ChangeKind.FORMAT_CHANGED, BREAKING,
                f"Format of '{path}' changed from {old.format or 'none'} "
                f"to {new.format or 'none'} in {site.where}",
                field=path, old_value=old.format, new_value=new.format,
            ))

        self._diff_enum(old, new, path, site, out)

        if old.properties or new.properties:
            self._diff_properties(old, new, path, direction, site, out)
        if old.item_schema is not None and new.item_schema is not None:
            self._diff_node(old.item_schema, new.item_schema, f"{path}[]", direction, site, out)

    def _diff_composition(
        self,
        old: SchemaNode,
        new: SchemaNode,
        path: str,
        direction: ValidationDirection,
        site: _Site,
        out: list[Change],
    ) -> None:
        old_shape, new_shape = _shape(old), _shape(new)
        if old_shape != new_shape:
            out.append(site.change(
                ChangeKind.TYPE_CHANGED, BREAKING,
                f"Type of '{path}' changed from {old_shape} to {new_shape} in {site.where}",
                field=path, old_value=old_shape, new_value=new_shape,
            ))
            return
        assert old.composition is not None and new.composition is not None
        self._diff_nullability(old, new, path, direction, site, out)
        for old_branch, new_branch in zip(old.composition.branches, new.composition.branches):
            self._diff_node(old_branch, new_branch, path, direction, site, out)

    def _diff_nullability(
        self,
        old: SchemaNode,
        new: SchemaNode,
        path: str,
        direction: ValidationDirection,
        site: _Site,
        out: list[Change],
    ) -> None:
        if old.nullable == new.nullable:
            return
        became_nullable = new.nullable
        if direction == ValidationDirection.RESPONSE:
            severity = BREAKING if became_nullable else NON_BREAKING
        else:
            severity = NON_BREAKING if became_nullable else BREAKING
        state = "nullable" if became_nullable else "non-nullable"
        out.append(site.change(
            ChangeKind.NULLABILITY_CHANGED, severity,
            f"'{path}' became {state} in {site.where}",
            field=path, old_value=str(old.nullable).lower(), new_value=str(new.nullable).lower(),
        ))

    def _diff_enum(
        self, old: SchemaNode, new: SchemaNode, path: str, site: _Site, out: list[Change]
    ) -> None:
        if old.enum_values is None and new.enum_values is None:
            return
        if new.enum_values is None:
            out.append(site.change(
                ChangeKind.ENUM_WIDENED, NON_BREAKING,
                f"Enum constraint removed from '{path}' in {site.where}",
                field=path, old_value=_render_values(old.enum_values),
            ))
            return
        if old.enum_values is None:
            out.append(site.change(
                ChangeKind.ENUM_NARROWED, BREAKING,
                f"Enum constraint added to '{path}' in {site.where}",
                field=path, new_value=_render_values(new.enum_values),
            ))
            return

        new_keys = {canonical(v) for v in new.enum_values}
        old_keys = {canonical(v) for v in old.enum_values}
        removed = [v for v in old.enum_values if canonical(v) not in new_keys]
        added = [v for v in new.enum_values if canonical(v) not in old_keys]
        if removed:
            out.append(site.change(
                ChangeKind.ENUM_NARROWED, BREAKING,
                f"Enum values {_render_values(removed)} removed from '{path}' in {site.where}",
                field=path, old_value=_render_values(removed),
            ))
        if added:
            out.append(site.change(
                ChangeKind.ENUM_WIDENED, NON_BREAKING,
                f"Enum values {_render_values(added)} added to '{path}' in {site.where}",
                field=path, new_value=_render_values(added),
            ))

    def _diff_properties(
        self,
        old: SchemaNode,
        new: SchemaNode,
        path: str,
        direction: ValidationDirection,
        site: _Site,
        out: list[Change],
    ) -> None:
        is_request = direction == ValidationDirection.REQUEST
        side = "request" if is_request else "response"
        old_props = old.visible_properties(direction)
        new_props = new.visible_properties(direction)

        for name, prop in old_props.items():
            field = paths.child(path, name)
            was_required = old.is_required(name)
            updated = new_props.get(name)
            if updated is None:
                if is_request:
                    out.append(site.change(
                        ChangeKind.FIELD_REMOVED, NON_BREAKING,
                        f"Request field '{field}' removed from {site.where}", field=field,
                    ))
                elif was_required:
                    out.append(site.change(
                        ChangeKind.REQUIRED_REMOVED, BREAKING,
                        f"Required response field '{field}' removed from {site.where}", field=field,
                    ))
                else:
                    out.append(site.change(
                        ChangeKind.FIELD_REMOVED, BREAKING,
                        f"Response field '{field}' removed from {site.where}", field=field,
                    ))
                continue

            now_required = new.is_required(name)
            if was_required and not now_required:
                out.append(site.change(
                    ChangeKind.REQUIRED_REMOVED, NON_BREAKING if is_request else BREAKING,
                    f"The {side} field '{field}' is no longer required in {site.where}",
                    field=field,
                ))
            elif not was_required and now_required and is_request:
                out.append(site.change(
                    ChangeKind.REQUIRED_ADDED, BREAKING,
                    f"Request field '{field}' became required in {site.where}", field=field,
                ))
            self._diff_node(prop.node, updated.node, field, direction, site, out)

        for name in new_props:
            if name in old_props:
                continue
            field = paths.child(path, name)
            if is_request and new.is_required(name):
                out.append(site.change(
                    ChangeKind.REQUIRED_ADDED, BREAKING,
                    f"Required request field '{field}' added to {site.where}", field=field,
                ))
            else:
                label = "Optional request field" if is_request else "Response field"
                out.append(site.change(
                    ChangeKind.FIELD_ADDED, NON_BREAKING,
                    f"{label} '{field}' added to {site.where}",
                    field=field,
                ))


def _render_values(values: list[Any]) -> str:
    return "[" + ", ".join(render_literal(v) for v in values) + "]"


def _contract_label(contract: ApiContract) -> str:
    return f"{contract.name} v{contract.version}"


# ---------------------------------------------------------------------------
# Module-level convenience
# ---------------------------------------------------------------------------


def compare(old: ApiContract, new: ApiContract) -> ContractDiff:
    """Compare two contracts and emit the result as telemetry."""
    diff = ContractComparator().compare(old, new)
    emit_contract_diff(diff)
    return diff


def compare_schemas(
    old: Union[SchemaNode, MatcherBase],
    new: Union[SchemaNode, MatcherBase],
    direction: Union[ValidationDirection, str],
) -> list[Change]:
    return ContractComparator().compare_schemas(old, new, direction)
