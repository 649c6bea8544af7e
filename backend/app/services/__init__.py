# Services Package
# Business rules and authorization, one module per HRMS area
