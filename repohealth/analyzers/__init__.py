"""Python and Java analyzers that report functions, imports and complexity."""