"""Go source model: lark grammar, AST, go.mod reader and package loader."""
