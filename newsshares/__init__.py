"""
Weekday News Shares Analysis
============================

Per-weekday analysis of online news article share counts.

Modules:
    - data_loader: CSV ingestion, configuration and validation
    - preprocessing: Weekday filter and stratified train/test split
    - eda: Descriptive statistics and plots of shares
    - model: Regression tree, boosted ensemble and linear model trainers
    - evaluation: Test-set RMSE and model comparison
    - report: Markdown reports per weekday and batch summary
"""

__version__ = "1.0.0"
__author__ = "Predictive Analytics Team"
