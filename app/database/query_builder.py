import json

ALLOWED_TABLES = ("users", "places", "bookings")

# Postgres array columns take Python lists as-is; every other list/dict goes in as JSON
ARRAY_COLUMNS = {"photos", "perks"}


def _prepare_value(key: str, value):
    if key in ARRAY_COLUMNS:
        return list(value or [])
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return value


class QueryBuilder:
    @staticmethod
    def build_insert_query(data: dict, table_name: str) -> tuple[str, list]:
        """
        Build INSERT ... RETURNING * query and values from dict.
        Does NOT execute - returns query and values for the caller to execute.

        Example:
            query, values = QueryBuilder.build_insert_query({"title": "Loft"}, "places")
            row = await conn.fetchrow(query, *values)
        """
        if table_name not in ALLOWED_TABLES:
            raise ValueError(f"Invalid table: {table_name}")
        if not data:
            raise ValueError("Nothing to insert")

        columns = ", ".join(data.keys())
        placeholders = ", ".join([f"${i+1}" for i in range(len(data))])
        values = [_prepare_value(key, value) for key, value in data.items()]

        query = f"INSERT INTO {table_name} ({columns}) VALUES ({placeholders}) RETURNING *"

        return query, values

    @staticmethod
    def build_update_query(
        data: dict,
        table_name: str,
        where_column: str,
        where_value,
    ) -> tuple[str, list]:
        """
        Build UPDATE ... RETURNING * query and values from dict.
        updated_at is always bumped; the WHERE value is the last parameter.

        Example:
            query, values = QueryBuilder.build_update_query(
                {"title": "Loft"}, "places", "id", place_id
            )
            row = await conn.fetchrow(query, *values)
        """
        if table_name not in ALLOWED_TABLES:
            raise ValueError(f"Invalid table: {table_name}")

        set_clauses = []
        values = []
        for i, (key, value) in enumerate(data.items()):
            set_clauses.append(f"{key} = ${i+1}")
            values.append(_prepare_value(key, value))
        set_clauses.append("updated_at = NOW()")
        set_statement = ", ".join(set_clauses)
        values.append(where_value)
        query = (
            f"UPDATE {table_name} SET {set_statement} "
            f"WHERE {where_column} = ${len(values)} RETURNING *"
        )

        return query, values
