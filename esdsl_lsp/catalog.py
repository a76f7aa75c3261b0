"""
catalog.py - Catálogo estático da Query DSL do Elasticsearch

Propósito:
    Dados de referência somente-leitura usados pelo provider de completion
    e pelo hover: tipos de query, tipos de agregação, propriedades da raiz,
    cláusulas bool, opções por cláusula, valores enumerados e snippets de
    documento completo.

Componentes principais:
    - QueryType / AggType: Definição de cláusula (nome, categoria, template)
    - PropertyDef: Propriedade JSON com detalhe e descrição
    - Snippet: Documento completo com placeholders ${n:default}
    - Lookups: get_query_type, search_query_types, get_agg_type,
      search_agg_types, clause_options, enum_values

Notas de implementação:
    - Carregado uma vez no import; nada aqui é alterado em runtime
    - Ordem das tuplas é a ordem de exibição (empates de boost)
    - Templates usam a sintaxe de snippet do LSP; o core não avalia
      placeholders, apenas os remove quando precisa de texto literal
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

# ${1:default} → default ; ${1} → ""
_PLACEHOLDER = re.compile(r"\$\{\d+(?::([^}]*))?\}")


@dataclass(frozen=True)
class QueryType:
    name: str
    category: str
    description: str
    template: str
    required_fields: tuple[str, ...] = ()
    optional_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class AggType:
    name: str
    category: str
    description: str
    template: str
    required_fields: tuple[str, ...] = ()
    optional_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class PropertyDef:
    name: str
    detail: str
    info: str = ""


@dataclass(frozen=True)
class Snippet:
    label: str
    detail: str
    template: str
    info: str = ""


def strip_placeholders(template: str) -> str:
    """Substitui placeholders ${n:default} pelo valor default."""
    return _PLACEHOLDER.sub(lambda m: m.group(1) or "", template)


# ---------------------------------------------------------------------------
# Tipos de query
# ---------------------------------------------------------------------------

FULL_TEXT_QUERIES: tuple[QueryType, ...] = (
    QueryType(
        "match", "full_text", "Standard full-text search with analysis",
        '"match": { "${1:field}": "${2:text}" }',
        required_fields=("query",),
        optional_fields=("operator", "fuzziness", "prefix_length", "analyzer", "boost"),
    ),
    QueryType(
        "match_phrase", "full_text", "Match exact phrase in order",
        '"match_phrase": { "${1:field}": "${2:phrase}" }',
        optional_fields=("slop", "analyzer", "boost"),
    ),
    QueryType(
        "match_phrase_prefix", "full_text", "Match phrase with prefix on last term",
        '"match_phrase_prefix": { "${1:field}": "${2:prefix}" }',
        optional_fields=("max_expansions", "slop", "analyzer"),
    ),
    QueryType(
        "multi_match", "full_text", "Search multiple fields",
        '"multi_match": {\n  "query": "${1:text}",\n  "fields": ["${2:field1}", "${3:field2}"]\n}',
        required_fields=("query", "fields"),
        optional_fields=("type", "operator", "tie_breaker", "fuzziness"),
    ),
    QueryType(
        "query_string", "full_text", "Lucene query syntax",
        '"query_string": {\n  "query": "${1:field:value AND other}",\n  "default_field": "${2:content}"\n}',
        required_fields=("query",),
        optional_fields=("default_field", "fields", "default_operator", "analyzer"),
    ),
    QueryType(
        "simple_query_string", "full_text", "Simple query syntax for users",
        '"simple_query_string": {\n  "query": "${1:text}",\n  "fields": ["${2:field}"]\n}',
        required_fields=("query",),
        optional_fields=("fields", "default_operator", "flags"),
    ),
    QueryType(
        "combined_fields", "full_text", "Search across multiple fields as one",
        '"combined_fields": {\n  "query": "${1:text}",\n  "fields": ["${2:field1}", "${3:field2}"]\n}',
        required_fields=("query", "fields"),
        optional_fields=("operator", "minimum_should_match"),
    ),
)

TERM_LEVEL_QUERIES: tuple[QueryType, ...] = (
    QueryType(
        "term", "term_level", "Exact value match (no analysis)",
        '"term": { "${1:field}": "${2:value}" }',
        optional_fields=("boost", "case_insensitive"),
    ),
    QueryType(
        "terms", "term_level", "Match any of multiple values",
        '"terms": { "${1:field}": ["${2:value1}", "${3:value2}"] }',
        optional_fields=("boost",),
    ),
    QueryType(
        "terms_set", "term_level", "Match minimum number of terms",
        '"terms_set": {\n  "${1:field}": {\n    "terms": ["${2:val1}", "${3:val2}"],\n'
        '    "minimum_should_match_script": { "source": "${4:2}" }\n  }\n}',
    ),
    QueryType(
        "range", "term_level", "Match values in a range",
        '"range": {\n  "${1:field}": {\n    "gte": ${2:0},\n    "lte": ${3:100}\n  }\n}',
        optional_fields=("gte", "gt", "lte", "lt", "format", "time_zone", "boost"),
    ),
    QueryType(
        "exists", "term_level", "Match documents with field",
        '"exists": { "field": "${1:field}" }',
        required_fields=("field",),
    ),
    QueryType(
        "prefix", "term_level", "Match terms with prefix",
        '"prefix": { "${1:field}": "${2:prefix}" }',
        optional_fields=("boost", "rewrite", "case_insensitive"),
    ),
    QueryType(
        "wildcard", "term_level", "Wildcard pattern match",
        '"wildcard": { "${1:field}": "${2:pattern*}" }',
        optional_fields=("boost", "rewrite", "case_insensitive"),
    ),
    QueryType(
        "regexp", "term_level", "Regular expression match",
        '"regexp": {\n  "${1:field}": {\n    "value": "${2:pattern}",\n    "flags": "ALL"\n  }\n}',
        optional_fields=("flags", "max_determinized_states", "rewrite"),
    ),
    QueryType(
        "fuzzy", "term_level", "Fuzzy (typo-tolerant) match",
        '"fuzzy": {\n  "${1:field}": {\n    "value": "${2:text}",\n    "fuzziness": "AUTO"\n  }\n}',
        optional_fields=("fuzziness", "max_expansions", "prefix_length", "transpositions"),
    ),
    QueryType(
        "ids", "term_level", "Match documents by ID",
        '"ids": { "values": ["${1:id1}", "${2:id2}"] }',
        required_fields=("values",),
    ),
)

COMPOUND_QUERIES: tuple[QueryType, ...] = (
    QueryType(
        "bool", "compound", "Combine multiple queries",
        '"bool": {\n  "must": [${1}],\n  "filter": [${2}],\n  "should": [${3}],\n  "must_not": [${4}]\n}',
        optional_fields=("must", "filter", "should", "must_not", "minimum_should_match", "boost"),
    ),
    QueryType(
        "boosting", "compound", "Boost or demote results",
        '"boosting": {\n  "positive": { ${1} },\n  "negative": { ${2} },\n  "negative_boost": ${3:0.5}\n}',
        required_fields=("positive", "negative", "negative_boost"),
    ),
    QueryType(
        "constant_score", "compound", "Return constant score",
        '"constant_score": {\n  "filter": { ${1} },\n  "boost": ${2:1.0}\n}',
        required_fields=("filter",),
        optional_fields=("boost",),
    ),
    QueryType(
        "dis_max", "compound", "Best matching subquery",
        '"dis_max": {\n  "queries": [${1}],\n  "tie_breaker": ${2:0.7}\n}',
        required_fields=("queries",),
        optional_fields=("tie_breaker", "boost"),
    ),
    QueryType(
        "function_score", "compound", "Custom scoring functions",
        '"function_score": {\n  "query": { ${1} },\n  "functions": [\n'
        '    { "filter": { ${2} }, "weight": ${3:2} }\n  ],\n'
        '  "score_mode": "sum",\n  "boost_mode": "multiply"\n}',
        required_fields=("query",),
        optional_fields=("functions", "score_mode", "boost_mode", "max_boost", "min_score"),
    ),
)

NESTED_QUERIES: tuple[QueryType, ...] = (
    QueryType(
        "nested", "nested", "Query nested objects",
        '"nested": {\n  "path": "${1:nested_field}",\n  "query": { ${2} }\n}',
        required_fields=("path", "query"),
        optional_fields=("score_mode", "inner_hits", "ignore_unmapped"),
    ),
    QueryType(
        "has_child", "nested", "Match parent by child",
        '"has_child": {\n  "type": "${1:child_type}",\n  "query": { ${2} }\n}',
        required_fields=("type", "query"),
        optional_fields=("min_children", "max_children", "score_mode", "inner_hits"),
    ),
    QueryType(
        "has_parent", "nested", "Match child by parent",
        '"has_parent": {\n  "parent_type": "${1:parent_type}",\n  "query": { ${2} }\n}',
        required_fields=("parent_type", "query"),
        optional_fields=("score", "inner_hits", "ignore_unmapped"),
    ),
)

GEO_QUERIES: tuple[QueryType, ...] = (
    QueryType(
        "geo_distance", "geo", "Filter by distance from point",
        '"geo_distance": {\n  "distance": "${1:10km}",\n  "${2:location}": {\n'
        '    "lat": ${3:40.73},\n    "lon": ${4:-73.99}\n  }\n}',
        required_fields=("distance",),
    ),
    QueryType(
        "geo_bounding_box", "geo", "Filter by bounding box",
        '"geo_bounding_box": {\n  "${1:location}": {\n'
        '    "top_left": { "lat": ${2:41.0}, "lon": ${3:-74.0} },\n'
        '    "bottom_right": { "lat": ${4:40.0}, "lon": ${5:-73.0} }\n  }\n}',
    ),
    QueryType(
        "geo_shape", "geo", "Filter by shape intersection",
        '"geo_shape": {\n  "${1:location}": {\n    "shape": {\n      "type": "${2:circle}",\n'
        '      "coordinates": [${3:-73.99}, ${4:40.73}],\n      "radius": "${5:5km}"\n    }\n  }\n}',
    ),
    QueryType(
        "geo_polygon", "geo", "Filter by polygon",
        '"geo_polygon": {\n  "${1:location}": {\n    "points": [\n'
        '      { "lat": ${2:40}, "lon": ${3:-74} },\n      { "lat": ${4:41}, "lon": ${5:-73} },\n'
        '      { "lat": ${6:40}, "lon": ${7:-72} }\n    ]\n  }\n}',
    ),
)

SPECIAL_QUERIES: tuple[QueryType, ...] = (
    QueryType(
        "match_all", "specialized", "Match all documents",
        '"match_all": {}',
        optional_fields=("boost",),
    ),
    QueryType("match_none", "specialized", "Match no documents", '"match_none": {}'),
    QueryType(
        "script", "specialized", "Script-based query",
        '"script": {\n  "script": {\n    "source": "${1:doc[\'field\'].value > params.value}",\n'
        '    "params": { "value": ${2:5} }\n  }\n}',
    ),
    QueryType(
        "percolate", "specialized", "Percolator query",
        '"percolate": {\n  "field": "${1:query}",\n  "document": { ${2} }\n}',
        required_fields=("field",),
        optional_fields=("document", "documents", "index", "id"),
    ),
    QueryType(
        "wrapper", "specialized", "Base64 encoded query",
        '"wrapper": { "query": "${1:base64_encoded_query}" }',
        required_fields=("query",),
    ),
)

ALL_QUERY_TYPES: tuple[QueryType, ...] = (
    FULL_TEXT_QUERIES
    + TERM_LEVEL_QUERIES
    + COMPOUND_QUERIES
    + NESTED_QUERIES
    + GEO_QUERIES
    + SPECIAL_QUERIES
)

QUERY_TYPE_MAP = MappingProxyType({q.name: q for q in ALL_QUERY_TYPES})
QUERY_TYPE_NAMES = frozenset(QUERY_TYPE_MAP)


# ---------------------------------------------------------------------------
# Tipos de agregação
# ---------------------------------------------------------------------------

METRIC_AGGS: tuple[AggType, ...] = (
    AggType(
        "avg", "metric", "Average value", '"avg": { "field": "${1:field}" }',
        required_fields=("field",), optional_fields=("missing", "script"),
    ),
    AggType("sum", "metric", "Sum of values", '"sum": { "field": "${1:field}" }', required_fields=("field",)),
    AggType("min", "metric", "Minimum value", '"min": { "field": "${1:field}" }', required_fields=("field",)),
    AggType("max", "metric", "Maximum value", '"max": { "field": "${1:field}" }', required_fields=("field",)),
    AggType(
        "stats", "metric", "Basic statistics (min, max, sum, count, avg)",
        '"stats": { "field": "${1:field}" }', required_fields=("field",),
    ),
    AggType(
        "extended_stats", "metric", "Extended statistics with variance, std deviation",
        '"extended_stats": { "field": "${1:field}" }',
        required_fields=("field",), optional_fields=("sigma",),
    ),
    AggType(
        "cardinality", "metric", "Approximate unique count",
        '"cardinality": { "field": "${1:field}" }',
        required_fields=("field",), optional_fields=("precision_threshold",),
    ),
    AggType(
        "value_count", "metric", "Count of values",
        '"value_count": { "field": "${1:field}" }', required_fields=("field",),
    ),
    AggType(
        "percentiles", "metric", "Percentile values",
        '"percentiles": {\n  "field": "${1:field}",\n  "percents": [50, 90, 95, 99]\n}',
        required_fields=("field",), optional_fields=("percents", "keyed", "tdigest", "hdr"),
    ),
    AggType(
        "percentile_ranks", "metric", "Percentile rank of values",
        '"percentile_ranks": {\n  "field": "${1:field}",\n  "values": [${2:100}, ${3:200}]\n}',
        required_fields=("field", "values"),
    ),
    AggType(
        "top_hits", "metric", "Top matching documents per bucket",
        '"top_hits": {\n  "size": ${1:3},\n  "sort": [{ "${2:date}": "desc" }],\n'
        '  "_source": { "includes": ["${3:title}"] }\n}',
        optional_fields=("size", "sort", "_source", "from"),
    ),
    AggType(
        "geo_bounds", "metric", "Bounding box of geo points",
        '"geo_bounds": { "field": "${1:location}" }',
        required_fields=("field",), optional_fields=("wrap_longitude",),
    ),
    AggType(
        "geo_centroid", "metric", "Centroid of geo points",
        '"geo_centroid": { "field": "${1:location}" }', required_fields=("field",),
    ),
)

BUCKET_AGGS: tuple[AggType, ...] = (
    AggType(
        "terms", "bucket", "Group by field values",
        '"terms": {\n  "field": "${1:field}.keyword",\n  "size": ${2:10}\n}',
        required_fields=("field",),
        optional_fields=("size", "order", "min_doc_count", "missing", "include", "exclude"),
    ),
    AggType(
        "histogram", "bucket", "Fixed-width numeric buckets",
        '"histogram": {\n  "field": "${1:field}",\n  "interval": ${2:50}\n}',
        required_fields=("field", "interval"),
        optional_fields=("min_doc_count", "extended_bounds", "offset", "order"),
    ),
    AggType(
        "date_histogram", "bucket", "Date/time buckets",
        '"date_histogram": {\n  "field": "${1:date}",\n  "calendar_interval": "${2:month}"\n}',
        required_fields=("field",),
        optional_fields=(
            "calendar_interval", "fixed_interval", "format", "time_zone", "offset", "min_doc_count",
        ),
    ),
    AggType(
        "range", "bucket", "Custom numeric ranges",
        '"range": {\n  "field": "${1:field}",\n  "ranges": [\n    { "to": ${2:50} },\n'
        '    { "from": ${3:50}, "to": ${4:100} },\n    { "from": ${5:100} }\n  ]\n}',
        required_fields=("field", "ranges"), optional_fields=("keyed",),
    ),
    AggType(
        "date_range", "bucket", "Custom date ranges",
        '"date_range": {\n  "field": "${1:date}",\n  "format": "yyyy-MM-dd",\n  "ranges": [\n'
        '    { "to": "now-1M/M" },\n    { "from": "now-1M/M", "to": "now" }\n  ]\n}',
        required_fields=("field", "ranges"), optional_fields=("format", "time_zone", "keyed"),
    ),
    AggType("filter", "bucket", "Single filter bucket", '"filter": { ${1} }'),
    AggType(
        "filters", "bucket", "Multiple named filter buckets",
        '"filters": {\n  "filters": {\n    "${1:bucket1}": { ${2} },\n    "${3:bucket2}": { ${4} }\n  }\n}',
        optional_fields=("other_bucket", "other_bucket_key"),
    ),
    AggType(
        "nested", "bucket", "Aggregate nested objects",
        '"nested": { "path": "${1:nested_field}" }', required_fields=("path",),
    ),
    AggType(
        "reverse_nested", "bucket", "Back to parent from nested",
        '"reverse_nested": {}', optional_fields=("path",),
    ),
    AggType(
        "composite", "bucket", "Paginated multi-source aggregation",
        '"composite": {\n  "size": ${1:100},\n  "sources": [\n'
        '    { "${2:field1}": { "terms": { "field": "${3:field1}.keyword" } } }\n  ]\n}',
        required_fields=("sources",), optional_fields=("size", "after"),
    ),
    AggType(
        "auto_date_histogram", "bucket", "Automatic date interval",
        '"auto_date_histogram": {\n  "field": "${1:date}",\n  "buckets": ${2:10}\n}',
        required_fields=("field",),
        optional_fields=("buckets", "format", "time_zone", "minimum_interval"),
    ),
    AggType(
        "significant_terms", "bucket", "Statistically significant terms",
        '"significant_terms": {\n  "field": "${1:field}.keyword"\n}',
        required_fields=("field",), optional_fields=("size", "min_doc_count", "background_filter"),
    ),
    AggType(
        "adjacency_matrix", "bucket", "Relationship between filters",
        '"adjacency_matrix": {\n  "filters": {\n    "${1:filter1}": { ${2} },\n'
        '    "${3:filter2}": { ${4} }\n  }\n}',
        required_fields=("filters",),
    ),
    AggType(
        "sampler", "bucket", "Sample documents",
        '"sampler": { "shard_size": ${1:100} }', optional_fields=("shard_size",),
    ),
    AggType(
        "diversified_sampler", "bucket", "Diverse sample by field",
        '"diversified_sampler": {\n  "shard_size": ${1:100},\n  "field": "${2:field}"\n}',
        optional_fields=("shard_size", "field", "max_docs_per_value"),
    ),
    AggType("global", "bucket", "All documents (ignore query)", '"global": {}'),
    AggType(
        "missing", "bucket", "Documents missing field",
        '"missing": { "field": "${1:field}" }', required_fields=("field",),
    ),
    AggType(
        "geo_distance", "bucket", "Distance rings from point",
        '"geo_distance": {\n  "field": "${1:location}",\n'
        '  "origin": { "lat": ${2:40.73}, "lon": ${3:-73.99} },\n  "ranges": [\n'
        '    { "to": 10 },\n    { "from": 10, "to": 50 },\n    { "from": 50 }\n  ],\n  "unit": "km"\n}',
        required_fields=("field", "origin", "ranges"), optional_fields=("unit", "distance_type"),
    ),
    AggType(
        "geohash_grid", "bucket", "Geohash grid buckets",
        '"geohash_grid": {\n  "field": "${1:location}",\n  "precision": ${2:5}\n}',
        required_fields=("field",), optional_fields=("precision", "size", "shard_size", "bounds"),
    ),
)

PIPELINE_AGGS: tuple[AggType, ...] = (
    AggType(
        "derivative", "pipeline", "Derivative of metric",
        '"derivative": { "buckets_path": "${1:metric_name}" }',
        required_fields=("buckets_path",), optional_fields=("gap_policy", "format", "unit"),
    ),
    AggType(
        "cumulative_sum", "pipeline", "Cumulative sum",
        '"cumulative_sum": { "buckets_path": "${1:metric_name}" }',
        required_fields=("buckets_path",), optional_fields=("format",),
    ),
    AggType(
        "moving_avg", "pipeline", "Moving average",
        '"moving_avg": {\n  "buckets_path": "${1:metric_name}",\n  "window": ${2:5}\n}',
        required_fields=("buckets_path",),
        optional_fields=("model", "window", "settings", "minimize", "predict"),
    ),
    AggType(
        "moving_fn", "pipeline", "Moving function",
        '"moving_fn": {\n  "buckets_path": "${1:metric_name}",\n  "window": ${2:5},\n'
        '  "script": "MovingFunctions.unweightedAvg(values)"\n}',
        required_fields=("buckets_path", "script"), optional_fields=("window", "gap_policy", "shift"),
    ),
    AggType(
        "bucket_script", "pipeline", "Custom bucket calculation",
        '"bucket_script": {\n  "buckets_path": {\n    "var1": "${1:metric1}",\n'
        '    "var2": "${2:metric2}"\n  },\n  "script": "params.var1 / params.var2"\n}',
        required_fields=("buckets_path", "script"), optional_fields=("format", "gap_policy"),
    ),
    AggType(
        "bucket_selector", "pipeline", "Filter buckets",
        '"bucket_selector": {\n  "buckets_path": { "count": "_count" },\n  "script": "params.count > 10"\n}',
        required_fields=("buckets_path", "script"), optional_fields=("gap_policy",),
    ),
    AggType(
        "bucket_sort", "pipeline", "Sort and truncate buckets",
        '"bucket_sort": {\n  "sort": [{ "${1:metric}": { "order": "desc" } }],\n  "size": ${2:10}\n}',
        optional_fields=("sort", "from", "size", "gap_policy"),
    ),
    AggType(
        "serial_diff", "pipeline", "Serial differencing",
        '"serial_diff": {\n  "buckets_path": "${1:metric_name}",\n  "lag": ${2:1}\n}',
        required_fields=("buckets_path",), optional_fields=("lag", "gap_policy", "format"),
    ),
    AggType(
        "avg_bucket", "pipeline", "Average of bucket values",
        '"avg_bucket": { "buckets_path": "${1:agg_name>metric_name}" }',
        required_fields=("buckets_path",), optional_fields=("gap_policy", "format"),
    ),
    AggType(
        "sum_bucket", "pipeline", "Sum of bucket values",
        '"sum_bucket": { "buckets_path": "${1:agg_name>metric_name}" }',
        required_fields=("buckets_path",), optional_fields=("gap_policy", "format"),
    ),
    AggType(
        "min_bucket", "pipeline", "Minimum bucket value",
        '"min_bucket": { "buckets_path": "${1:agg_name>metric_name}" }',
        required_fields=("buckets_path",), optional_fields=("gap_policy", "format"),
    ),
    AggType(
        "max_bucket", "pipeline", "Maximum bucket value",
        '"max_bucket": { "buckets_path": "${1:agg_name>metric_name}" }',
        required_fields=("buckets_path",), optional_fields=("gap_policy", "format"),
    ),
    AggType(
        "stats_bucket", "pipeline", "Stats of bucket values",
        '"stats_bucket": { "buckets_path": "${1:agg_name>metric_name}" }',
        required_fields=("buckets_path",), optional_fields=("gap_policy", "format"),
    ),
    AggType(
        "percentiles_bucket", "pipeline", "Percentiles of bucket values",
        '"percentiles_bucket": {\n  "buckets_path": "${1:agg_name>metric_name}",\n  "percents": [50, 90, 99]\n}',
        required_fields=("buckets_path",), optional_fields=("percents", "gap_policy", "format"),
    ),
)

ALL_AGG_TYPES: tuple[AggType, ...] = METRIC_AGGS + BUCKET_AGGS + PIPELINE_AGGS

AGG_TYPE_MAP = MappingProxyType({a.name: a for a in ALL_AGG_TYPES})
AGG_TYPE_NAMES = frozenset(AGG_TYPE_MAP)


# ---------------------------------------------------------------------------
# Propriedades e palavras-chave
# ---------------------------------------------------------------------------

ROOT_PROPERTIES: tuple[PropertyDef, ...] = (
    PropertyDef("query", "Query DSL", "Define the search query"),
    PropertyDef("aggs", "Aggregations", "Define aggregations"),
    PropertyDef("aggregations", "Aggregations", "Alias for aggs"),
    PropertyDef("size", "number", "Number of hits to return"),
    PropertyDef("from", "number", "Starting offset for results"),
    PropertyDef("sort", "array", "Sort order for results"),
    PropertyDef("_source", "array/object", "Control source fields returned"),
    PropertyDef("highlight", "object", "Highlight matching text"),
    PropertyDef("suggest", "object", "Suggester configuration"),
    PropertyDef("track_total_hits", "boolean/number", "Track accurate hit count"),
    PropertyDef("timeout", "string", "Search timeout (e.g., '10s')"),
    PropertyDef("terminate_after", "number", "Max docs to collect per shard"),
    PropertyDef("min_score", "number", "Minimum score threshold"),
    PropertyDef("explain", "boolean", "Include score explanation"),
    PropertyDef("version", "boolean", "Include document version"),
    PropertyDef("seq_no_primary_term", "boolean", "Include sequence number"),
    PropertyDef("stored_fields", "array", "Return stored fields"),
    PropertyDef("docvalue_fields", "array", "Return doc values"),
    PropertyDef("script_fields", "object", "Compute fields via scripts"),
    PropertyDef("indices_boost", "array", "Boost specific indices"),
    PropertyDef("collapse", "object", "Collapse results by field"),
    PropertyDef("search_after", "array", "Pagination cursor"),
    PropertyDef("pit", "object", "Point in time for deep pagination"),
    PropertyDef("runtime_mappings", "object", "Runtime field definitions"),
)

BOOL_CLAUSES: tuple[PropertyDef, ...] = (
    PropertyDef("must", "array", "All clauses must match (AND)"),
    PropertyDef("filter", "array", "Must match, no scoring"),
    PropertyDef("should", "array", "At least one should match (OR)"),
    PropertyDef("must_not", "array", "Must not match (NOT)"),
    PropertyDef("minimum_should_match", "number/string", "Minimum matching should clauses"),
    PropertyDef("boost", "number", "Boost this query's score"),
)

BOOL_CLAUSE_NAMES = frozenset({"must", "should", "filter", "must_not"})

HIGHLIGHT_OPTIONS: tuple[PropertyDef, ...] = (
    PropertyDef("fields", "object", "Fields to highlight"),
    PropertyDef("pre_tags", "array", "Tags inserted before highlighted text"),
    PropertyDef("post_tags", "array", "Tags inserted after highlighted text"),
    PropertyDef("require_field_match", "boolean", "Only highlight fields that matched"),
    PropertyDef("type", "string", "Highlighter type (unified, plain, fvh)"),
)

SOURCE_OPTIONS: tuple[PropertyDef, ...] = (
    PropertyDef("includes", "array", "Fields to include"),
    PropertyDef("excludes", "array", "Fields to exclude"),
)

SUGGEST_OPTIONS: tuple[PropertyDef, ...] = (
    PropertyDef("text", "string", "Text shared by all suggesters"),
    PropertyDef("term", "object", "Term suggester"),
    PropertyDef("phrase", "object", "Phrase suggester"),
    PropertyDef("completion", "object", "Completion suggester"),
)

# Opções detalhadas por cláusula; as demais usam required/optional do catálogo
QUERY_OPTIONS = MappingProxyType({
    "match": (
        PropertyDef("query", "string", "Text to search for"),
        PropertyDef("operator", "string", "and/or for multiple terms"),
        PropertyDef("fuzziness", "string", "Edit distance for fuzzy matching"),
        PropertyDef("prefix_length", "number", "Characters that must match exactly"),
        PropertyDef("max_expansions", "number", "Maximum fuzzy expansions"),
        PropertyDef("analyzer", "string", "Analyzer to use"),
        PropertyDef("boost", "number", "Query boost factor"),
        PropertyDef("lenient", "boolean", "Ignore type mismatches"),
        PropertyDef("zero_terms_query", "string", "none/all for empty query"),
        PropertyDef("auto_generate_synonyms_phrase_query", "boolean", "Use synonyms"),
    ),
    "range": (
        PropertyDef("gte", "value", "Greater than or equal"),
        PropertyDef("gt", "value", "Greater than"),
        PropertyDef("lte", "value", "Less than or equal"),
        PropertyDef("lt", "value", "Less than"),
        PropertyDef("format", "string", "Date format"),
        PropertyDef("time_zone", "string", "Time zone for date parsing"),
        PropertyDef("boost", "number", "Query boost factor"),
        PropertyDef("relation", "string", "Range relation for ranges"),
    ),
    "terms": (
        PropertyDef("boost", "number", "Query boost factor"),
    ),
    "multi_match": (
        PropertyDef("query", "string", "Text to search for"),
        PropertyDef("fields", "array", "Fields to search"),
        PropertyDef("type", "string", "Match type (best_fields, most_fields, etc.)"),
        PropertyDef("operator", "string", "and/or for multiple terms"),
        PropertyDef("tie_breaker", "number", "Tie breaker for scoring"),
        PropertyDef("fuzziness", "string", "Edit distance for fuzzy matching"),
        PropertyDef("analyzer", "string", "Analyzer to use"),
    ),
})

# Valores enumerados por chave
ENUM_VALUES = MappingProxyType({
    "order": ("asc", "desc"),
    "type": ("best_fields", "most_fields", "cross_fields", "phrase", "phrase_prefix"),
    "operator": ("and", "or", "AND", "OR"),
    "zero_terms_query": ("none", "all"),
    "mode": ("min", "max", "avg", "sum", "median"),
    "missing": ("_first", "_last"),
    "execution": ("fielddata",),
    "relation": ("intersects", "contains", "within", "disjoint"),
    "score_mode": ("multiply", "sum", "avg", "first", "max", "min"),
    "boost_mode": ("multiply", "replace", "sum", "avg", "max", "min"),
    "distance_type": ("arc", "plane"),
    "gap_policy": ("skip", "insert_zeros"),
})

ENUM_VALUE_KEYS = frozenset(ENUM_VALUES)


# ---------------------------------------------------------------------------
# Snippets de documento completo
# ---------------------------------------------------------------------------

SNIPPETS: tuple[Snippet, ...] = (
    Snippet(
        "search-basic", "Basic Search",
        '{\n  "query": {\n    "match": { "${1:field}": "${2:text}" }\n  }\n}',
        "Simple match query",
    ),
    Snippet(
        "search-bool", "Bool Query",
        '{\n  "query": {\n    "bool": {\n      "must": [\n'
        '        { "match": { "${1:field}": "${2:text}" } }\n      ],\n      "filter": [\n'
        '        { "term": { "${3:status}": "${4:active}" } }\n      ]\n    }\n  }\n}',
        "Bool query with must and filter",
    ),
    Snippet(
        "search-range", "Range Query",
        '{\n  "query": {\n    "range": {\n      "${1:date}": {\n'
        '        "gte": "${2:now-1d}",\n        "lte": "${3:now}"\n      }\n    }\n  }\n}',
        "Date/numeric range query",
    ),
    Snippet(
        "search-pagination", "Paginated Search",
        '{\n  "query": { "match_all": {} },\n  "from": ${1:0},\n  "size": ${2:10},\n'
        '  "sort": [{ "${3:date}": "desc" }]\n}',
        "Search with pagination and sorting",
    ),
    Snippet(
        "aggs-terms", "Terms Aggregation",
        '{\n  "size": 0,\n  "aggs": {\n    "${1:by_field}": {\n      "terms": {\n'
        '        "field": "${2:field}.keyword",\n        "size": ${3:10}\n      }\n    }\n  }\n}',
        "Group by field values",
    ),
    Snippet(
        "aggs-date-histogram", "Date Histogram",
        '{\n  "size": 0,\n  "aggs": {\n    "${1:over_time}": {\n      "date_histogram": {\n'
        '        "field": "${2:timestamp}",\n        "calendar_interval": "${3:day}"\n      }\n    }\n  }\n}',
        "Time-based bucketing",
    ),
    Snippet(
        "aggs-nested", "Nested Aggregation",
        '{\n  "size": 0,\n  "aggs": {\n    "${1:by_category}": {\n'
        '      "terms": { "field": "${2:category}.keyword" },\n      "aggs": {\n'
        '        "${3:avg_price}": {\n          "avg": { "field": "${4:price}" }\n'
        '        }\n      }\n    }\n  }\n}',
        "Bucket with sub-aggregation",
    ),
    Snippet(
        "aggs-stats", "Statistics",
        '{\n  "size": 0,\n  "aggs": {\n    "${1:stats}": {\n'
        '      "stats": { "field": "${2:price}" }\n    }\n  }\n}',
        "Get min, max, avg, sum, count",
    ),
    Snippet(
        "highlight", "Highlight Matches",
        '{\n  "query": { "match": { "${1:content}": "${2:search text}" } },\n'
        '  "highlight": {\n    "fields": {\n      "${1:content}": {}\n    }\n  }\n}',
        "Highlight matching text",
    ),
    Snippet(
        "suggest", "Suggester",
        '{\n  "suggest": {\n    "${1:my-suggest}": {\n      "text": "${2:text}",\n'
        '      "term": { "field": "${3:title}" }\n    }\n  }\n}',
        "Term/phrase suggester",
    ),
    Snippet(
        "filter-exists", "Exists Filter",
        '{\n  "query": {\n    "bool": {\n      "filter": [\n'
        '        { "exists": { "field": "${1:field}" } }\n      ]\n    }\n  }\n}',
        "Filter docs with field",
    ),
    Snippet(
        "search-geo", "Geo Distance",
        '{\n  "query": {\n    "geo_distance": {\n      "distance": "${1:10km}",\n'
        '      "${2:location}": {\n        "lat": ${3:40.73},\n        "lon": ${4:-73.99}\n'
        '      }\n    }\n  }\n}',
        "Filter by distance from point",
    ),
    Snippet(
        "collapse", "Collapse Results",
        '{\n  "query": { "match_all": {} },\n  "collapse": {\n    "field": "${1:user_id}",\n'
        '    "inner_hits": {\n      "name": "latest",\n      "size": 3,\n'
        '      "sort": [{ "${2:date}": "desc" }]\n    }\n  }\n}',
        "Collapse by field with inner hits",
    ),
    Snippet(
        "script-field", "Script Field",
        '{\n  "query": { "match_all": {} },\n  "script_fields": {\n'
        '    "${1:calculated_field}": {\n      "script": {\n'
        '        "source": "doc[\'${2:field}\'].value * ${3:2}"\n      }\n    }\n  }\n}',
        "Computed field via script",
    ),
)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def get_query_type(name: str) -> Optional[QueryType]:
    return QUERY_TYPE_MAP.get(name)


def search_query_types(prefix: str) -> tuple[QueryType, ...]:
    """Tipos de query cujo nome começa com prefix (sem diferenciar caixa)."""
    lower = prefix.lower()
    return tuple(q for q in ALL_QUERY_TYPES if q.name.lower().startswith(lower))


def get_agg_type(name: str) -> Optional[AggType]:
    return AGG_TYPE_MAP.get(name)


def search_agg_types(prefix: str) -> tuple[AggType, ...]:
    """Tipos de agregação cujo nome começa com prefix (sem diferenciar caixa)."""
    lower = prefix.lower()
    return tuple(a for a in ALL_AGG_TYPES if a.name.lower().startswith(lower))


def clause_options(name: str, prefer_agg: bool = False) -> tuple[PropertyDef, ...]:
    """
    Opções aceitas no corpo de uma cláusula (query ou agregação).

    Usa a lista detalhada de QUERY_OPTIONS quando existe; senão deriva dos
    campos required/optional da definição. prefer_agg escolhe a agregação
    quando o nome existe nos dois catálogos (range, terms, nested, ...).
    """
    if not prefer_agg and name in QUERY_OPTIONS:
        return QUERY_OPTIONS[name]

    query_def = QUERY_TYPE_MAP.get(name)
    agg_def = AGG_TYPE_MAP.get(name)
    definition = (agg_def or query_def) if prefer_agg else (query_def or agg_def)
    if definition is None:
        return ()

    options: list[PropertyDef] = []
    for field_name in definition.required_fields:
        options.append(PropertyDef(field_name, "required", f"Required by {name}"))
    for field_name in definition.optional_fields:
        if field_name not in definition.required_fields:
            options.append(PropertyDef(field_name, "optional", f"Optional for {name}"))
    return tuple(options)


def enum_values(key: str) -> tuple[str, ...]:
    """Valores enumerados registrados para a chave (vazio se desconhecida)."""
    return ENUM_VALUES.get(key, ())
