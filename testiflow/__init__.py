"""TestiFlow: testimonial collection client and reference backend."""
