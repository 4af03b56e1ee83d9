"""Hypothesis strategies for schemas and records."""

from hypothesis import strategies as st

field_names = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyz_",
    min_size=1,
    max_size=12,
)

string_values = st.text(min_size=1, max_size=50)

# (required field names, record holding a subset of them)
required_fields_and_record = st.lists(field_names, min_size=1, max_size=8, unique=True).flatmap(
    lambda names: st.tuples(
        st.just(names),
        st.fixed_dictionaries({}, optional={n: string_values for n in names}),
    )
)
