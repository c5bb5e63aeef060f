"""
Database Schema Models

Pydantic models for the normalized schema snapshot extracted from a live
database. The snapshot is what the agent reasons about when it proposes
joins, filters and constraints, so every model here is strict about shape.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ColumnSchema(BaseModel):
    """A column in a table, in ordinal position order."""

    name: str = Field(..., description="Column name")
    data_type: str = Field(..., description="Catalog-native data type")
    is_nullable: bool = Field(..., description="Whether column can be NULL")
    default: str | None = Field(None, description="Default expression, if any")
    comment: str | None = Field(None, description="Column comment, if any")

    @field_validator("default", "comment", mode="before")
    @classmethod
    def empty_as_none(cls, v: str | None) -> str | None:
        """Catalog queries coalesce missing values to ''; treat those as absent."""
        if v == "":
            return None
        return v


class ForeignKey(BaseModel):
    """A foreign key constraint, one record per constraint name."""

    name: str = Field(..., description="Constraint name")
    columns: list[str] = Field(..., description="Referencing columns, in key order")
    referenced_table: str = Field(..., description="Referenced table")
    referenced_columns: list[str] = Field(..., description="Referenced columns, in key order")

    @model_validator(mode="after")
    def validate_column_pairs(self) -> "ForeignKey":
        """Each referencing column must map to exactly one referenced column."""
        if len(self.columns) != len(self.referenced_columns):
            raise ValueError(
                f"Foreign key {self.name} has {len(self.columns)} columns but "
                f"{len(self.referenced_columns)} referenced columns"
            )
        return self


class IndexSchema(BaseModel):
    """A non-primary index on a table."""

    name: str = Field(..., description="Index name")
    columns: list[str] = Field(..., description="Indexed columns, in index order")
    is_unique: bool = Field(..., description="Whether the index enforces uniqueness")


class TableSchema(BaseModel):
    """A base table with its columns, keys and indexes."""

    name: str = Field(..., description="Table name")
    columns: list[ColumnSchema] = Field(default_factory=list)
    primary_key: list[str] = Field(default_factory=list)
    foreign_keys: list[ForeignKey] = Field(default_factory=list)
    indexes: list[IndexSchema] = Field(default_factory=list)


class DatabaseSchema(BaseModel):
    """
    Point-in-time snapshot of a database schema.

    Tables keep the extractor's ordering (lexicographic by table name) and
    table names are unique within one snapshot.
    """

    database_name: str = Field(..., description="Active database name")
    tables: list[TableSchema] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "database_name": "shop",
                "tables": [
                    {
                        "name": "orders",
                        "columns": [
                            {
                                "name": "id",
                                "data_type": "integer",
                                "is_nullable": False,
                                "default": "nextval('orders_id_seq'::regclass)",
                                "comment": None,
                            }
                        ],
                        "primary_key": ["id"],
                        "foreign_keys": [],
                        "indexes": [],
                    }
                ],
            }
        }
    )

    @model_validator(mode="after")
    def validate_unique_tables(self) -> "DatabaseSchema":
        """Reject snapshots that list the same table twice."""
        seen: set[str] = set()
        for table in self.tables:
            if table.name in seen:
                raise ValueError(f"Duplicate table in schema snapshot: {table.name}")
            seen.add(table.name)
        return self

    def get_table(self, name: str) -> TableSchema | None:
        for table in self.tables:
            if table.name == name:
                return table
        return None
